# t-SNE tutorial on the iris measurements (2D and 3D)
import time
from typing import Dict, Sequence

import numpy as np
import pandas as pd
from sklearn.manifold import TSNE

try:
    from .config import *
    from .datasets import inspect_dataframe, load_iris, prepare_iris_features
    from .plotting import embedding_grid, group_scatter, save_figure, save_table, scatter_3d_html, scatter_3d_static
    from .quality import embedding_quality, quality_table
except ImportError:
    from config import *
    from datasets import inspect_dataframe, load_iris, prepare_iris_features
    from plotting import embedding_grid, group_scatter, save_figure, save_table, scatter_3d_html, scatter_3d_static
    from quality import embedding_quality, quality_table

# t-SNE preserves local neighbourhoods: clusters in the plot are points that
# are similar in the original space. Distances between clusters, cluster
# sizes and the axes themselves carry no meaning, and there is no explained
# variance per dimension (unlike PCA).
#
# Practical tips:
# - Perplexity: try values between 5 and 50 (balance of local vs global)
# - Iterations: increase max_iter if the layout is not stable
# - Multiple runs: t-SNE is stochastic, compare several seeds
# - Scaling: always scale the data first

def fit_tsne(scaled, n_components: int = 2, perplexity: float = TSNE_PERPLEXITY,
             theta: float = TSNE_THETA, max_iter: int = TSNE_MAX_ITER, seed: int = SEED) -> np.ndarray:
    """
    Barnes-Hut t-SNE embedding of a scaled matrix.

    Args:
        scaled: Scaled numeric matrix without duplicate rows
        n_components: Output dimensions (2 or 3)
        perplexity: Effective number of neighbours
        theta: Speed/accuracy trade-off (sklearn's 'angle')
        max_iter: Optimisation iterations
        seed: Random seed

    Returns:
        Embedding array of shape (n_samples, n_components)
    """
    tsne = TSNE(n_components=n_components, perplexity=perplexity, angle=theta,
                max_iter=max_iter, init="pca", random_state=seed)
    return tsne.fit_transform(np.asarray(scaled, dtype=float))

def embedding_frame(embedding: np.ndarray, species: pd.Series) -> pd.DataFrame:
    """Embedding as Dim1..Dimk plus the Species labels of the same rows."""
    frame = pd.DataFrame(embedding, index=species.index,
                         columns=[f"Dim{i + 1}" for i in range(embedding.shape[1])])
    frame[IRIS_LABEL] = species
    return frame

def perplexity_sweep(scaled, perplexities: Sequence[float] = TSNE_PERPLEXITY_SWEEP,
                     seed: int = SEED, max_iter: int = TSNE_MAX_ITER) -> Dict[str, np.ndarray]:
    """2D embeddings for several perplexities (same seed)."""
    out = {}
    for p in perplexities:
        print(f"[tsne] perplexity={p}")
        out[f"perplexity = {p}"] = fit_tsne(scaled, perplexity=p, max_iter=max_iter, seed=seed)
    return out

def seed_sweep(scaled, seeds: Sequence[int] = TSNE_SEED_SWEEP,
               max_iter: int = TSNE_MAX_ITER) -> Dict[str, np.ndarray]:
    """2D embeddings for several seeds (same perplexity)."""
    out = {}
    for s in seeds:
        print(f"[tsne] seed={s}")
        out[f"seed = {s}"] = fit_tsne(scaled, seed=s, max_iter=max_iter)
    return out

def run_tsne_tutorial(output_dir: str = OUTPUT_DIR, seed: int = SEED, max_iter: int = TSNE_MAX_ITER,
                      sweeps: bool = True) -> Dict:
    """
    Complete t-SNE walkthrough on iris.

    Args:
        output_dir: Directory for figures and tables
        seed: Random seed
        max_iter: Optimisation iterations for every run
        sweeps: Also run the perplexity and seed sweeps

    Returns:
        Dictionary with the scaled input, 2D/3D frames, quality tables and file paths
    """
    tag = "tsne"
    start = time.perf_counter()
    print("=" * 60)
    print("t-SNE TUTORIAL")
    print("=" * 60)

    # 1. Load and inspect
    iris = load_iris()
    inspect_dataframe(iris, "iris")

    # 2. Deduplicate the raw table (t-SNE fails on duplicates), drop Species, scale
    iris_unique, iris_scaled = prepare_iris_features(iris)
    species = iris_unique[IRIS_LABEL]
    print(f"[{tag}] {len(iris_scaled)} unique flowers, {iris_scaled.shape[1]} scaled measurements")

    # 3. t-SNE in 2 and 3 dimensions
    print(f"[{tag}] perplexity={TSNE_PERPLEXITY}, theta={TSNE_THETA}, max_iter={max_iter}")
    emb_2d = fit_tsne(iris_scaled, n_components=2, max_iter=max_iter, seed=seed)
    emb_3d = fit_tsne(iris_scaled, n_components=3, max_iter=max_iter, seed=seed)
    tsne_data_2d = embedding_frame(emb_2d, species)
    tsne_data_3d = embedding_frame(emb_3d, species)
    quality = embedding_quality(iris_scaled.values, emb_2d)
    print(f"[{tag}] 2D trustworthiness={quality['trustworthiness']:.4f}")

    files = [
        save_table(tsne_data_2d, output_dir, f"{tag}_2d.csv"),
        save_table(tsne_data_3d, output_dir, f"{tag}_3d.csv"),
    ]

    # 4a. 2D view. Setosa is well separated; versicolor and virginica
    # partly overlap, so these two species are more similar.
    fig = group_scatter(tsne_data_2d, "Dim1", "Dim2", IRIS_LABEL, "t-SNE Visualization of Iris Dataset",
                        "t-SNE Dimension 1", "t-SNE Dimension 2", palette=SPECIES_PALETTE)
    files.append(save_figure(fig, output_dir, f"{tag}_2d.png"))

    # 4b. 3D view
    axis_titles = ["t-SNE Dimension 1", "t-SNE Dimension 2", "t-SNE Dimension 3"]
    files.append(scatter_3d_html(tsne_data_3d, IRIS_LABEL, "3D t-SNE Visualization of Iris Dataset",
                                 axis_titles, output_dir, f"{tag}_3d.html"))
    fig = scatter_3d_static(tsne_data_3d, IRIS_LABEL, "3D t-SNE Visualization of Iris Dataset", axis_titles)
    files.append(save_figure(fig, output_dir, f"{tag}_3d.png"))

    sweep_quality = None
    if sweeps:
        by_perplexity = perplexity_sweep(iris_scaled, seed=seed, max_iter=max_iter)
        fig = embedding_grid(by_perplexity, species, "t-SNE: effect of perplexity", ncols=len(by_perplexity))
        files.append(save_figure(fig, output_dir, f"{tag}_perplexity_sweep.png"))

        by_seed = seed_sweep(iris_scaled, max_iter=max_iter)
        fig = embedding_grid(by_seed, species, "t-SNE: effect of the random seed", ncols=len(by_seed))
        files.append(save_figure(fig, output_dir, f"{tag}_seed_sweep.png"))

        sweep_quality = quality_table(iris_scaled.values, {**by_perplexity, **by_seed})
        files.append(save_table(sweep_quality, output_dir, f"{tag}_sweep_quality.csv", index=False))

    runtime = time.perf_counter() - start
    print(f"[{tag}] Done in {runtime:.1f}s")
    return {
        "tag": tag,
        "input": iris_scaled,
        "embedding_2d": tsne_data_2d,
        "embedding_3d": tsne_data_3d,
        "quality": quality,
        "sweep_quality": sweep_quality,
        "files": files,
        "runtime_s": runtime,
    }

if __name__ == "__main__":
    run_tsne_tutorial()
