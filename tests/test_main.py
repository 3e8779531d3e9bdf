"""End-to-end test of the orchestration script."""

import os

import pandas as pd

import dimred_tutorials.main as main_module
from dimred_tutorials.tsne import run_tsne_tutorial
from dimred_tutorials.umap_embedding import run_umap_tutorial


def test_run_all_tutorials(output_dir, monkeypatch, capsys):
    # Skip the slow sweeps; the full run is exercised by the per-method tests
    monkeypatch.setattr(main_module, "run_tsne_tutorial",
                        lambda output_dir: run_tsne_tutorial(output_dir=output_dir, max_iter=300, sweeps=False))
    monkeypatch.setattr(main_module, "run_umap_tutorial",
                        lambda output_dir: run_umap_tutorial(output_dir=output_dir, grid=False))

    results = main_module.run_all_tutorials(output_dir=output_dir)
    assert list(results) == ["PCA", "FAMD", "MDS", "t-SNE", "UMAP"]

    comparison = pd.read_csv(os.path.join(output_dir, "method_comparison.csv"))
    assert comparison["method"].tolist() == ["PCA", "FAMD", "MDS", "t-SNE", "UMAP"]
    assert comparison.loc[comparison["method"] == "PCA", "dim1_dim2_variance_pct"].iloc[0] > 85
    assert comparison.loc[comparison["method"] == "FAMD", "trustworthiness"].isna().all()
    assert comparison.loc[comparison["method"] == "t-SNE", "n_rows"].iloc[0] == 149

    with open(os.path.join(output_dir, "ANALYSIS_SUMMARY.txt"), encoding="utf-8") as f:
        report = f.read()
    assert "METHOD COMPARISON" in report
    assert "pca_biplot.png" in report
    assert "Stress-1" in report

    out = capsys.readouterr().out
    files_section = out.split("Key files generated in")[1]
    assert "pca_biplot.png" in files_section
    assert "mds_shepard.png" in files_section
    assert "ANALYSIS_SUMMARY.txt" in files_section
