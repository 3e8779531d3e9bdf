# Main orchestration script - runs every tutorial and compares the techniques
import os
from datetime import datetime
from typing import Dict

import numpy as np
import pandas as pd

try:
    from .config import *
    from .famd_mixed import run_famd_tutorial
    from .mds import run_mds_tutorial
    from .pca_numerical import run_pca_tutorial
    from .plotting import save_table
    from .quality import embedding_quality
    from .tsne import run_tsne_tutorial
    from .umap_embedding import run_umap_tutorial
except ImportError:
    from config import *
    from famd_mixed import run_famd_tutorial
    from mds import run_mds_tutorial
    from pca_numerical import run_pca_tutorial
    from plotting import save_table
    from quality import embedding_quality
    from tsne import run_tsne_tutorial
    from umap_embedding import run_umap_tutorial

def method_comparison(results: Dict[str, Dict]) -> pd.DataFrame:
    """
    One row per technique: data, dimensionality, variance and neighbourhood quality.

    Variance explained is only reported for the linear factor methods; the
    non-linear embeddings do not define it.
    """
    rows = []

    pca = results["PCA"]
    rows.append({
        "method": "PCA", "dataset": "mtcars", "n_rows": len(pca["scores"]),
        "n_input_variables": pca["input"].shape[1], "n_output_dimensions": 2,
        "dim1_dim2_variance_pct": round(pca["summary"]["cumulative_proportion"].iloc[1] * 100, 2),
        "trustworthiness": embedding_quality(pca["input"].values, pca["scores"].iloc[:, :2].values)["trustworthiness"],
        "runtime_s": pca["runtime_s"],
    })

    famd = results["FAMD"]
    rows.append({
        "method": "FAMD", "dataset": "mtcars (mixed)", "n_rows": len(famd["coordinates"]),
        "n_input_variables": famd["input"].shape[1], "n_output_dimensions": 2,
        "dim1_dim2_variance_pct": round(famd["eigenvalues"]["cumulative_percentage_of_variance"].iloc[1], 2),
        "trustworthiness": np.nan,
        "runtime_s": famd["runtime_s"],
    })

    mds = results["MDS"]
    rows.append({
        "method": "MDS", "dataset": "mtcars", "n_rows": len(mds["coordinates"]),
        "n_input_variables": mds["input"].shape[1], "n_output_dimensions": 2,
        "dim1_dim2_variance_pct": np.nan,
        "trustworthiness": mds["quality"]["trustworthiness"],
        "runtime_s": mds["runtime_s"],
    })

    for name in ("t-SNE", "UMAP"):
        res = results[name]
        rows.append({
            "method": name, "dataset": "iris (deduplicated)", "n_rows": len(res["embedding_2d"]),
            "n_input_variables": res["input"].shape[1], "n_output_dimensions": 2,
            "dim1_dim2_variance_pct": np.nan,
            "trustworthiness": res["quality"]["trustworthiness"],
            "runtime_s": res["runtime_s"],
        })

    df = pd.DataFrame(rows)
    df["trustworthiness"] = df["trustworthiness"].round(4)
    df["runtime_s"] = df["runtime_s"].round(2)
    return df

def create_summary_report(results: Dict[str, Dict], comparison: pd.DataFrame, output_dir: str) -> str:
    """Write ANALYSIS_SUMMARY.txt and return its path."""
    report = []
    report.append("# Dimensionality Reduction Tutorials Summary")
    report.append("=" * 70)
    report.append("")
    report.append(f"Analysis Date: {datetime.now().strftime('%Y-%m-%d %H:%M')}")
    report.append(f"Random Seed: {SEED}")
    report.append("")

    report.append("## METHOD COMPARISON")
    report.append("")
    report.append(comparison.to_string(index=False))
    report.append("")

    pca = results["PCA"]["summary"]
    report.append("### PCA (mtcars, continuous variables)")
    report.append(f"- Dim1: {pca['proportion_of_variance'].iloc[0] * 100:.1f}% of the variance")
    report.append(f"- Dim2: {pca['proportion_of_variance'].iloc[1] * 100:.1f}% of the variance")
    report.append("")

    report.append("### FAMD (mtcars, numerical + categorical)")
    for line in results["FAMD"]["interpretation"]:
        report.append(f"- {line.strip()}")
    report.append("")

    mds = results["MDS"]
    report.append("### MDS (mtcars)")
    report.append(f"- Stress-1: {mds['stress1']:.3f}")
    report.append(f"- Spearman correlation of distances: {mds['spearman']:.3f}")
    report.append("")

    report.append("### t-SNE / UMAP (iris)")
    report.append(f"- Unique flowers embedded: {len(results['t-SNE']['embedding_2d'])}")
    report.append("- Neither method reports explained variance; compare them on neighbourhood preservation")
    report.append("")

    report.append("## KEY FILES GENERATED")
    report.append("")
    for name, res in results.items():
        report.append(f"### {name}")
        for path in res["files"]:
            report.append(f"- {os.path.basename(path)}")
        report.append("")

    path = os.path.join(output_dir, "ANALYSIS_SUMMARY.txt")
    with open(path, "w", encoding="utf-8") as f:
        f.write("\n".join(report))

    print(f"Summary report created: {path}")
    return path

def run_all_tutorials(output_dir: str = OUTPUT_DIR) -> Dict[str, Dict]:
    """Run PCA, FAMD, MDS, t-SNE and UMAP in turn and compare them."""
    os.makedirs(output_dir, exist_ok=True)
    print("=" * 60)
    print("DIMENSIONALITY REDUCTION TUTORIALS")
    print("=" * 60)
    print(f"Analysis started at: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print(f"Random seed: {SEED}")
    print(f"Output directory: {output_dir}")
    print()

    results = {}
    print("Step 1: PCA on continuous mtcars variables")
    results["PCA"] = run_pca_tutorial(output_dir=output_dir)
    print("\nStep 2: FAMD on mixed mtcars")
    results["FAMD"] = run_famd_tutorial(output_dir=output_dir)
    print("\nStep 3: MDS on numerical mtcars variables")
    results["MDS"] = run_mds_tutorial(output_dir=output_dir)
    print("\nStep 4: t-SNE on iris")
    results["t-SNE"] = run_tsne_tutorial(output_dir=output_dir)
    print("\nStep 5: UMAP on iris")
    results["UMAP"] = run_umap_tutorial(output_dir=output_dir)

    print("\nStep 6: Comparing methods")
    print("-" * 50)
    comparison = method_comparison(results)
    print(comparison.to_string(index=False))
    save_table(comparison, output_dir, "method_comparison.csv", index=False)
    create_summary_report(results, comparison, output_dir)

    print("\n" + "=" * 60)
    print("ANALYSIS COMPLETE!")
    print("=" * 60)
    print(f"\nKey files generated in {output_dir}:")
    for name, res in results.items():
        print(f"  {name}:")
        for path in res["files"]:
            print(f"    - {os.path.basename(path)}")
    print("  Summary:")
    print("    - method_comparison.csv")
    print("    - ANALYSIS_SUMMARY.txt")
    print(f"Analysis completed at: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    return results

def main():
    """Console entry point."""
    run_all_tutorials()

if __name__ == "__main__":
    main()
