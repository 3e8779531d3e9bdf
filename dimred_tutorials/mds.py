# Multidimensional Scaling (MDS) tutorial on the numerical mtcars variables
import time
from typing import Dict

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
from scipy.spatial.distance import pdist, squareform
from scipy.stats import spearmanr
from sklearn.manifold import MDS

try:
    from .config import *
    from .datasets import inspect_dataframe, load_mtcars, scale_dataframe, select_columns
    from .plotting import labelled_scatter, save_figure, save_table
    from .quality import embedding_quality
except ImportError:
    from config import *
    from datasets import inspect_dataframe, load_mtcars, scale_dataframe, select_columns
    from plotting import labelled_scatter, save_figure, save_table
    from quality import embedding_quality

# Advantages of MDS:
# - Visual representation of the dissimilarities between observations
# - Works well with distance matrices derived from numerical data
# - Useful for exploratory analysis to spot patterns and clusters
#
# Disadvantages of MDS:
# - Not suitable for categorical or mixed data
# - Computationally intensive for large datasets
# - Sensitive to the choice of distance metric
# - The MDS dimensions have no inherent meaning
#
# Prefer PCA, t-SNE or UMAP for mixed/categorical data, or when local or
# global structure has to be preserved non-linearly.

def distance_matrix(scaled: pd.DataFrame, metric: str = "euclidean") -> pd.DataFrame:
    """Square pairwise distance matrix labelled by observation."""
    d = squareform(pdist(scaled.values, metric=metric))
    return pd.DataFrame(d, index=scaled.index, columns=scaled.index)

def fit_mds(distances: pd.DataFrame, n_components: int = MDS_COMPONENTS, seed: int = SEED,
            init: str = MDS_INIT, n_init: int = MDS_N_INIT):
    """
    Metric MDS on a precomputed square distance matrix.

    Args:
        distances: Symmetric distance matrix labelled by observation
        n_components: Output dimensions (k)
        seed: Random seed
        init: 'classical_mds' (classical scaling start) or 'random'
        n_init: Number of SMACOF runs

    Returns:
        Tuple of (fitted_model, points array of shape (n_samples, n_components))
    """
    mds = MDS(n_components=n_components, metric="precomputed", init=init, n_init=n_init,
              random_state=seed)
    points = mds.fit_transform(distances.values)
    return mds, points

def mds_frame(points: np.ndarray, labels) -> pd.DataFrame:
    """MDS coordinates as Dim1, Dim2, ... plus a 'Car' column."""
    frame = pd.DataFrame(points, columns=[f"Dim{i + 1}" for i in range(points.shape[1])])
    frame["Car"] = list(labels)
    return frame

def shepard_table(distances: pd.DataFrame, points: np.ndarray):
    """
    Original vs embedded pairwise distances (Shepard diagram data).

    Returns:
        Tuple of (pairs dataframe, stress-1, Spearman rank correlation)
    """
    original = squareform(distances.values, checks=False)
    embedded = pdist(points)
    labels = list(distances.index)
    i, j = np.triu_indices(len(labels), k=1)
    pairs = pd.DataFrame({
        "item_a": [labels[k] for k in i],
        "item_b": [labels[k] for k in j],
        "original_distance": original,
        "embedded_distance": embedded,
    })
    stress1 = float(np.sqrt(((original - embedded) ** 2).sum() / (original ** 2).sum()))
    rho, _ = spearmanr(original, embedded)
    return pairs, stress1, float(rho)

def nearest_neighbours(distances: pd.DataFrame, k: int = MDS_NEIGHBOURS) -> pd.DataFrame:
    """The k most similar observations of every observation."""
    rows = []
    for name, row in distances.iterrows():
        closest = row.drop(labels=[name]).nsmallest(k)
        rec = {"item": name}
        for rank, (other, dist) in enumerate(closest.items(), start=1):
            rec[f"neighbour_{rank}"] = other
            rec[f"distance_{rank}"] = round(float(dist), 3)
        rows.append(rec)
    return pd.DataFrame(rows)

def plot_shepard(pairs: pd.DataFrame, stress1: float, rho: float):
    """Scatter of embedded vs original distances with the identity line."""
    fig, ax = plt.subplots(figsize=(6, 6))
    ax.scatter(pairs["original_distance"], pairs["embedded_distance"], s=8, alpha=0.5, color="steelblue")
    lim = max(pairs["original_distance"].max(), pairs["embedded_distance"].max()) * 1.05
    ax.plot([0, lim], [0, lim], color="red", linestyle="--", linewidth=1)
    ax.set_xlim(0, lim)
    ax.set_ylim(0, lim)
    ax.set_xlabel("Original distance (scaled data)")
    ax.set_ylabel("Distance in MDS space")
    ax.set_title(f"Shepard diagram\nstress-1 = {stress1:.3f}, Spearman rho = {rho:.3f}")
    ax.grid(alpha=0.3)
    return fig

def run_mds_tutorial(output_dir: str = OUTPUT_DIR, seed: int = SEED) -> Dict:
    """
    Complete MDS walkthrough on mtcars.

    Args:
        output_dir: Directory for figures and tables
        seed: Random seed

    Returns:
        Dictionary with the model, scaled input, distances, coordinates and file paths
    """
    tag = "mds"
    start = time.perf_counter()
    print("=" * 60)
    print("MDS TUTORIAL")
    print("=" * 60)

    # 1. Load and inspect
    mtcars = load_mtcars()
    inspect_dataframe(mtcars, "mtcars")

    # 2. MDS requires numerical data only: the categorical 'vs' and 'am' are excluded
    mtcars_numerical = select_columns(mtcars, MTCARS_MDS)
    mtcars_scaled = scale_dataframe(mtcars_numerical)

    # 3. Euclidean distance matrix
    distances = distance_matrix(mtcars_scaled)
    print(f"[{tag}] Distance matrix: {distances.shape[0]} x {distances.shape[1]}")

    # 4. Metric MDS in two dimensions on the distance matrix
    mds, points = fit_mds(distances, seed=seed)
    mds_data = mds_frame(points, mtcars.index)
    pairs, stress1, rho = shepard_table(distances, points)
    neighbours = nearest_neighbours(distances)
    quality = embedding_quality(mtcars_scaled.values, points)
    print(f"[{tag}] stress-1={stress1:.4f}, Spearman rho={rho:.4f}, "
          f"trustworthiness={quality['trustworthiness']:.4f}")

    files = [
        save_table(distances.round(4), output_dir, f"{tag}_distance_matrix.csv"),
        save_table(mds_data, output_dir, f"{tag}_coordinates.csv", index=False),
        save_table(neighbours, output_dir, f"{tag}_nearest_neighbours.csv", index=False),
        save_table(pairs, output_dir, f"{tag}_shepard.csv", index=False),
    ]

    # 5. Each point is a car; cars close together are similar on the
    # numerical variables (mpg, horsepower, weight, ...), cars far apart
    # are dissimilar.
    fig = labelled_scatter(mds_data, "Dim1", "Dim2", "MDS Visualization of mtcars Dataset",
                           "MDS Dimension 1", "MDS Dimension 2", labels=mds_data["Car"], color="blue")
    files.append(save_figure(fig, output_dir, f"{tag}_mtcars.png"))
    files.append(save_figure(plot_shepard(pairs, stress1, rho), output_dir, f"{tag}_shepard.png"))

    runtime = time.perf_counter() - start
    print(f"[{tag}] Done in {runtime:.1f}s")
    return {
        "tag": tag,
        "model": mds,
        "input": mtcars_scaled,
        "distances": distances,
        "coordinates": mds_data,
        "stress1": stress1,
        "spearman": rho,
        "quality": quality,
        "neighbours": neighbours,
        "files": files,
        "runtime_s": runtime,
    }

if __name__ == "__main__":
    run_mds_tutorial()
