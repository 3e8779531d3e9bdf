# PCA tutorial for continuous numerical variables (mtcars)
import time
from typing import Dict, Sequence, Tuple

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
from sklearn.decomposition import PCA

try:
    from .config import *
    from .datasets import continuous_mtcars_columns, inspect_dataframe, load_mtcars, scale_dataframe, select_columns
    from .plotting import (contribution_bar_plot, correlation_circle, dim_label, labelled_scatter,
                           save_figure, save_table, scree_plot)
except ImportError:
    from config import *
    from datasets import continuous_mtcars_columns, inspect_dataframe, load_mtcars, scale_dataframe, select_columns
    from plotting import (contribution_bar_plot, correlation_circle, dim_label, labelled_scatter,
                          save_figure, save_table, scree_plot)

# Binary variables are not strictly wrong in a PCA, but their variance
# structure differs from continuous variables. PCA maximises variance, so
# low-variance 0/1 columns can pull the components disproportionately.
# With many binary/categorical variables, MCA or FAMD (famd_mixed.py) fit
# better. Running both variants shows how much they move the components.

def fit_pca(scaled: pd.DataFrame, seed: int = SEED) -> Tuple[PCA, pd.DataFrame]:
    """Fit a full PCA and return the model with the scores (Dim1..Dimp)."""
    pca = PCA(n_components=scaled.shape[1], random_state=seed)
    scores = pca.fit_transform(scaled.values)
    dims = [f"Dim{i + 1}" for i in range(scores.shape[1])]
    return pca, pd.DataFrame(scores, index=scaled.index, columns=dims)

def pca_summary(pca: PCA) -> pd.DataFrame:
    """
    Standard deviation, proportion and cumulative proportion of variance per component.

    The scaled input has unit population variance, so eigenvalues are put
    on the same ddof=0 scale and add up to the number of variables.
    """
    prop = pca.explained_variance_ratio_
    eigenvalues = pca.explained_variance_ * (pca.n_samples_ - 1) / pca.n_samples_
    return pd.DataFrame({
        "standard_deviation": np.sqrt(eigenvalues),
        "eigenvalue": eigenvalues,
        "proportion_of_variance": prop,
        "cumulative_proportion": np.cumsum(prop),
    }, index=[f"Dim{i + 1}" for i in range(len(prop))])

def variable_coordinates(scaled: pd.DataFrame, scores: pd.DataFrame) -> pd.DataFrame:
    """Signed correlation between every variable and every component."""
    combined = np.column_stack([scaled.values, scores.values])
    corr = np.corrcoef(combined.T)
    n_vars = scaled.shape[1]
    return pd.DataFrame(corr[:n_vars, n_vars:], index=scaled.columns, columns=scores.columns)

def variable_contributions(pca: PCA, columns: Sequence[str]) -> pd.DataFrame:
    """Contribution (%) of each variable to each component; every column sums to 100."""
    contrib = (pca.components_ ** 2).T * 100.0
    dims = [f"Dim{i + 1}" for i in range(contrib.shape[1])]
    return pd.DataFrame(contrib, index=list(columns), columns=dims)

def individual_contributions(scores: pd.DataFrame, axes: Sequence[int] = (0, 1)) -> pd.Series:
    """Contribution (%) of each observation to the inertia of the chosen axes."""
    sq = scores.iloc[:, list(axes)] ** 2
    return (sq.sum(axis=1) / sq.values.sum() * 100.0).rename("contrib")

def individual_cos2(scores: pd.DataFrame, axes: Sequence[int] = (0, 1)) -> pd.Series:
    """Quality of representation of each observation on the chosen axes (0..1)."""
    sq = scores ** 2
    total = sq.sum(axis=1).replace(0, np.nan)
    return (sq.iloc[:, list(axes)].sum(axis=1) / total).fillna(0.0).rename("cos2")

def describe_components(contrib: pd.DataFrame, coords: pd.DataFrame, summary: pd.DataFrame,
                        n_dims: int = 2, tag: str = "pca") -> pd.DataFrame:
    """
    Print which variables define each component.

    A variable is reported when its contribution exceeds the expected
    average (100 / number of variables). The sign of its correlation tells
    on which side of the axis high values of the variable lie.

    Returns:
        DataFrame with one row per (dimension, reported variable)
    """
    expected = 100.0 / len(contrib)
    rows = []
    for i in range(min(n_dims, contrib.shape[1])):
        dim = contrib.columns[i]
        pct = summary["proportion_of_variance"].iloc[i] * 100
        above = contrib[dim][contrib[dim] > expected].sort_values(ascending=False)
        print(f"[{tag}] {dim} ({pct:.1f}% of the variance) is driven by:")
        for var, c in above.items():
            r = coords.loc[var, dim]
            side = "positive" if r > 0 else "negative"
            print(f"[{tag}]   - {var}: contribution {c:.1f}%, correlation {r:+.2f} ({side} side)")
            rows.append({"dimension": dim, "variable": var, "contribution_pct": round(c, 2),
                         "correlation": round(r, 3), "direction": side})
    return pd.DataFrame(rows)

def plot_biplot(scores: pd.DataFrame, coords: pd.DataFrame, summary: pd.DataFrame, title: str):
    """Observations as black points and variables as blue arrows on Dim1/Dim2."""
    fig, ax = plt.subplots(figsize=(10, 8))
    ax.scatter(scores["Dim1"], scores["Dim2"], color="black", s=15)
    for name, (x, y) in scores[["Dim1", "Dim2"]].iterrows():
        ax.annotate(str(name), (x, y), textcoords="offset points", xytext=(0, 5), ha="center", fontsize=7)

    # Stretch the unit-circle arrows to the spread of the scores
    scale = 0.8 * np.abs(scores[["Dim1", "Dim2"]].values).max() / np.abs(coords[["Dim1", "Dim2"]].values).max()
    for var, (x, y) in coords[["Dim1", "Dim2"]].iterrows():
        ax.annotate("", xy=(x * scale, y * scale), xytext=(0, 0),
                    arrowprops=dict(arrowstyle="->", color="steelblue", lw=1.5))
        ax.text(x * scale * 1.08, y * scale * 1.08, var, color="steelblue", fontsize=10, ha="center")

    pct = summary["proportion_of_variance"].values * 100
    ax.axhline(0, color="k", linestyle="--", alpha=0.3)
    ax.axvline(0, color="k", linestyle="--", alpha=0.3)
    ax.set_xlabel(dim_label(0, pct[0]))
    ax.set_ylabel(dim_label(1, pct[1]))
    ax.set_title(title)
    ax.grid(alpha=0.3)
    return fig

def run_pca_tutorial(output_dir: str = OUTPUT_DIR, include_discrete: bool = False,
                     seed: int = SEED) -> Dict:
    """
    Complete PCA walkthrough on mtcars.

    Args:
        output_dir: Directory for figures and tables
        include_discrete: Keep vs, am, gear, carb (the "try both" variant)
        seed: Random seed passed to the library

    Returns:
        Dictionary with the model, scaled input, scores, tables and file paths
    """
    tag = "pca_all_vars" if include_discrete else "pca"
    start = time.perf_counter()
    print("=" * 60)
    print(f"PCA TUTORIAL ({'with' if include_discrete else 'without'} binary/discrete variables)")
    print("=" * 60)

    # 1. Load and inspect
    mtcars = load_mtcars()
    inspect_dataframe(mtcars, "mtcars")

    # 2. Preprocess: continuous variables only, then scale
    columns = continuous_mtcars_columns(include_discrete)
    mtcars_continuous = select_columns(mtcars, columns)
    mtcars_scaled = scale_dataframe(mtcars_continuous)
    print(f"[{tag}] Scaled {mtcars_scaled.shape[1]} variables: {columns}")

    # 3. PCA
    pca, scores = fit_pca(mtcars_scaled, seed=seed)
    summary = pca_summary(pca)
    print(f"[{tag}] Importance of components:")
    print(summary.round(4).T.to_string())

    # 4-6. Interpretation tables
    coords = variable_coordinates(mtcars_scaled, scores)
    contrib = variable_contributions(pca, columns)
    ind_contrib = individual_contributions(scores)
    ind_cos2 = individual_cos2(scores)
    interpretation = describe_components(contrib, coords, summary, tag=tag)

    files = [
        save_table(summary, output_dir, f"{tag}_summary.csv"),
        save_table(coords, output_dir, f"{tag}_variable_coordinates.csv"),
        save_table(contrib, output_dir, f"{tag}_variable_contributions.csv"),
        save_table(scores.assign(contrib=ind_contrib, cos2=ind_cos2), output_dir, f"{tag}_scores.csv"),
        save_table(interpretation, output_dir, f"{tag}_interpretation.csv", index=False),
    ]
    pct = summary["proportion_of_variance"].values * 100

    # Scree plot: variance explained by each principal component
    files.append(save_figure(scree_plot(pct, "Scree plot"), output_dir, f"{tag}_scree.png"))

    # Biplot: cars on the right (Cadillac Fleetwood, Lincoln Continental,
    # Chrysler Imperial) point along wt, disp and cyl: heavy cars with large
    # engines. Cars on the left (Honda Civic, Fiat 128, Toyota Corolla) are
    # light, small-engined and efficient (high mpg). Vertically, qsec
    # separates slow-accelerating cars (Merc 230, Toyota Corona) from
    # light cars with decent acceleration (Porsche 914-2, Lotus Europa).
    # Arrows pointing the same way are positively correlated.
    fig = plot_biplot(scores, coords, summary, "PCA - Biplot")
    files.append(save_figure(fig, output_dir, f"{tag}_biplot.png"))

    # Variables coloured by contribution
    fig = correlation_circle(coords[["Dim1", "Dim2"]], "Variables - PCA",
                             dim_label(0, pct[0]), dim_label(1, pct[1]),
                             color_values=contrib[["Dim1", "Dim2"]].sum(axis=1) / 2)
    files.append(save_figure(fig, output_dir, f"{tag}_variables_contrib.png"))

    # Contributions to Dim1 (engine size, power, weight, fuel efficiency)
    # and Dim2 (acceleration and rear axle ratio), side by side
    fig, axes = plt.subplots(1, 2, figsize=(12, 4.5))
    contribution_bar_plot(contrib["Dim1"], "Contribution of variables to Dim-1", ax=axes[0])
    contribution_bar_plot(contrib["Dim2"], "Contribution of variables to Dim-2", ax=axes[1])
    files.append(save_figure(fig, output_dir, f"{tag}_contributions_dim1_dim2.png"))

    # Individuals: plain points, then coloured by contribution
    fig = labelled_scatter(scores, "Dim1", "Dim2", "Individuals - PCA",
                           dim_label(0, pct[0]), dim_label(1, pct[1]), color="black")
    files.append(save_figure(fig, output_dir, f"{tag}_individuals.png"))
    fig = labelled_scatter(scores, "Dim1", "Dim2", "Individuals - PCA (coloured by contribution)",
                           dim_label(0, pct[0]), dim_label(1, pct[1]), labels=scores.index,
                           color_values=ind_contrib.values, color_label="contrib")
    files.append(save_figure(fig, output_dir, f"{tag}_individuals_contrib.png"))

    runtime = time.perf_counter() - start
    print(f"[{tag}] Done in {runtime:.1f}s")
    return {
        "tag": tag,
        "model": pca,
        "input": mtcars_scaled,
        "scores": scores,
        "summary": summary,
        "coordinates": coords,
        "contributions": contrib,
        "individual_contributions": ind_contrib,
        "individual_cos2": ind_cos2,
        "interpretation": interpretation,
        "files": files,
        "runtime_s": runtime,
    }

def compare_discrete_variants(output_dir: str = OUTPUT_DIR) -> pd.DataFrame:
    """Run the PCA with and without the binary/discrete variables and compare variance."""
    rows = []
    for include in (False, True):
        res = run_pca_tutorial(output_dir=output_dir, include_discrete=include)
        s = res["summary"]
        rows.append({
            "variant": res["tag"],
            "n_variables": res["input"].shape[1],
            "dim1_pct": round(s["proportion_of_variance"].iloc[0] * 100, 2),
            "dim2_pct": round(s["proportion_of_variance"].iloc[1] * 100, 2),
            "dim1_dim2_cumulative_pct": round(s["cumulative_proportion"].iloc[1] * 100, 2),
        })
    comparison = pd.DataFrame(rows)
    save_table(comparison, output_dir, "pca_variant_comparison.csv", index=False)
    print(comparison.to_string(index=False))
    return comparison

if __name__ == "__main__":
    compare_discrete_variants()
