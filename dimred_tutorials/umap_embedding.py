# UMAP tutorial on the iris measurements (2D and 3D)
import time
from typing import Dict, Sequence

import numpy as np
from umap import UMAP

try:
    from .config import *
    from .datasets import inspect_dataframe, load_iris, prepare_iris_features
    from .plotting import embedding_grid, group_scatter, save_figure, save_table, scatter_3d_html, scatter_3d_static
    from .quality import embedding_quality, quality_table
    from .tsne import embedding_frame
except ImportError:
    from config import *
    from datasets import inspect_dataframe, load_iris, prepare_iris_features
    from plotting import embedding_grid, group_scatter, save_figure, save_table, scatter_3d_html, scatter_3d_static
    from quality import embedding_quality, quality_table
    from tsne import embedding_frame

# Advantages of UMAP:
# - Faster than t-SNE, especially on large datasets
# - Preserves local and, to a larger extent than t-SNE, global structure
# - Reproducible for a fixed seed
#
# Disadvantages of UMAP:
# - No explained variance per dimension (unlike PCA)
# - Sensitive to n_neighbors and min_dist
# - Dimensions are not interpretable
# - May struggle with extremely high-dimensional or noisy data
#
# Prefer t-SNE on small/medium data where local structure matters most.

def fit_umap(scaled, n_components: int = 2, n_neighbors: int = UMAP_N_NEIGHBORS,
             min_dist: float = UMAP_MIN_DIST, seed: int = SEED) -> np.ndarray:
    """
    UMAP embedding of a scaled matrix.

    Args:
        scaled: Scaled numeric matrix without duplicate rows
        n_components: Output dimensions (2 or 3)
        n_neighbors: Size of the local neighbourhood (local vs global balance)
        min_dist: Minimum spacing of points in the embedding
        seed: Random seed (fixing it disables UMAP's parallel optimisation)

    Returns:
        Embedding array of shape (n_samples, n_components)
    """
    reducer = UMAP(n_components=n_components, n_neighbors=n_neighbors, min_dist=min_dist,
                   random_state=seed)
    return reducer.fit_transform(np.asarray(scaled, dtype=float))

def hyperparameter_grid(scaled, n_neighbors_values: Sequence[int] = UMAP_NEIGHBORS_GRID,
                        min_dist_values: Sequence[float] = UMAP_MIN_DIST_GRID,
                        seed: int = SEED) -> Dict[str, np.ndarray]:
    """2D embeddings for every (n_neighbors, min_dist) pair."""
    out = {}
    for nn in n_neighbors_values:
        for md in min_dist_values:
            print(f"[umap] n_neighbors={nn}, min_dist={md}")
            out[f"n_neighbors={nn}, min_dist={md}"] = fit_umap(scaled, n_neighbors=nn, min_dist=md, seed=seed)
    return out

def run_umap_tutorial(output_dir: str = OUTPUT_DIR, seed: int = SEED, grid: bool = True) -> Dict:
    """
    Complete UMAP walkthrough on iris.

    Args:
        output_dir: Directory for figures and tables
        seed: Random seed
        grid: Also run the n_neighbors x min_dist grid

    Returns:
        Dictionary with the scaled input, 2D/3D frames, quality tables and file paths
    """
    tag = "umap"
    start = time.perf_counter()
    print("=" * 60)
    print("UMAP TUTORIAL")
    print("=" * 60)

    # 1. Load and inspect
    iris = load_iris()
    inspect_dataframe(iris, "iris")

    # 2. Deduplicate the raw table, drop Species, scale
    iris_unique, iris_scaled = prepare_iris_features(iris)
    species = iris_unique[IRIS_LABEL]
    print(f"[{tag}] {len(iris_scaled)} unique flowers, {iris_scaled.shape[1]} scaled measurements")

    # 3. UMAP in 2 and 3 dimensions
    print(f"[{tag}] n_neighbors={UMAP_N_NEIGHBORS}, min_dist={UMAP_MIN_DIST}")
    emb_2d = fit_umap(iris_scaled, n_components=2, seed=seed)
    emb_3d = fit_umap(iris_scaled, n_components=3, seed=seed)
    umap_data_2d = embedding_frame(emb_2d, species)
    umap_data_3d = embedding_frame(emb_3d, species)
    quality = embedding_quality(iris_scaled.values, emb_2d)
    print(f"[{tag}] 2D trustworthiness={quality['trustworthiness']:.4f}")

    files = [
        save_table(umap_data_2d, output_dir, f"{tag}_2d.csv"),
        save_table(umap_data_3d, output_dir, f"{tag}_3d.csv"),
    ]

    # 4a. 2D view
    fig = group_scatter(umap_data_2d, "Dim1", "Dim2", IRIS_LABEL, "UMAP Visualization of Iris Dataset",
                        "UMAP Dimension 1", "UMAP Dimension 2", palette=SPECIES_PALETTE)
    files.append(save_figure(fig, output_dir, f"{tag}_2d.png"))

    # 4b. 3D view. Setosa forms its own cluster; the overlap of versicolor
    # and virginica shows these two species are more similar.
    axis_titles = ["UMAP Dimension 1", "UMAP Dimension 2", "UMAP Dimension 3"]
    files.append(scatter_3d_html(umap_data_3d, IRIS_LABEL, "3D UMAP Visualization of Iris Dataset",
                                 axis_titles, output_dir, f"{tag}_3d.html"))
    fig = scatter_3d_static(umap_data_3d, IRIS_LABEL, "3D UMAP Visualization of Iris Dataset", axis_titles)
    files.append(save_figure(fig, output_dir, f"{tag}_3d.png"))

    grid_quality = None
    if grid:
        embeddings = hyperparameter_grid(iris_scaled, seed=seed)
        fig = embedding_grid(embeddings, species, "UMAP: n_neighbors (rows) x min_dist (columns)",
                             ncols=len(UMAP_MIN_DIST_GRID))
        files.append(save_figure(fig, output_dir, f"{tag}_hyperparameter_grid.png"))
        grid_quality = quality_table(iris_scaled.values, embeddings)
        files.append(save_table(grid_quality, output_dir, f"{tag}_grid_quality.csv", index=False))

    runtime = time.perf_counter() - start
    print(f"[{tag}] Done in {runtime:.1f}s")
    return {
        "tag": tag,
        "input": iris_scaled,
        "embedding_2d": umap_data_2d,
        "embedding_3d": umap_data_3d,
        "quality": quality,
        "grid_quality": grid_quality,
        "files": files,
        "runtime_s": runtime,
    }

if __name__ == "__main__":
    run_umap_tutorial()
