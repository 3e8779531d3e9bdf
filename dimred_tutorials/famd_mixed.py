# Factor Analysis of Mixed Data (FAMD) tutorial: numerical + categorical mtcars
import time
from typing import Dict, List, Sequence, Tuple

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
import seaborn as sns
from prince import FAMD
from scipy.stats import chi2_contingency, pearsonr

try:
    from .config import *
    from .datasets import build_mixed_mtcars, inspect_dataframe, load_mtcars, split_variable_types
    from .plotting import (contribution_bar_plot, correlation_circle, dim_label, group_scatter,
                           labelled_scatter, save_figure, save_table, scree_plot)
except ImportError:
    from config import *
    from datasets import build_mixed_mtcars, inspect_dataframe, load_mtcars, split_variable_types
    from plotting import (contribution_bar_plot, correlation_circle, dim_label, group_scatter,
                          labelled_scatter, save_figure, save_table, scree_plot)

def fit_famd(df_mixed: pd.DataFrame, n_components: int = FAMD_COMPONENTS, seed: int = SEED):
    """
    Fit FAMD and return the model with the individuals' coordinates.

    Args:
        df_mixed: float numerics plus category columns
        n_components: Number of dimensions kept (ncp)
        seed: Random seed

    Returns:
        Tuple of (fitted_model, row_coordinates as Dim1..Dimk)
    """
    famd = FAMD(n_components=n_components, random_state=seed)
    famd.fit(df_mixed)
    coords = famd.row_coordinates(df_mixed)
    coords = pd.DataFrame(np.asarray(coords), index=df_mixed.index,
                          columns=[f"Dim{i + 1}" for i in range(np.asarray(coords).shape[1])])
    return famd, coords

def eigenvalue_table(famd: FAMD) -> pd.DataFrame:
    """Eigenvalue, percentage of variance and cumulative percentage per component."""
    eigs = np.asarray(famd.eigenvalues_, dtype=float)
    pct = np.asarray(famd.percentage_of_variance_, dtype=float)
    return pd.DataFrame({
        "eigenvalue": eigs,
        "percentage_of_variance": pct,
        "cumulative_percentage_of_variance": np.cumsum(pct),
    }, index=[f"comp {i + 1}" for i in range(len(eigs))])

def category_labels(df_mixed: pd.DataFrame, cat_cols: Sequence[str]) -> Dict[str, Tuple[str, str]]:
    """Map one-hot column names ('Gears_FiveG' or 'FiveG') to (factor, level)."""
    labels = {}
    for col in cat_cols:
        for level in df_mixed[col].cat.categories:
            labels[f"{col}_{level}"] = (col, str(level))
            labels[str(level)] = (col, str(level))
    return labels

def split_contributions(famd: FAMD, df_mixed: pd.DataFrame) -> Dict[str, pd.DataFrame]:
    """
    Split the column contributions into quantitative variables and categories.

    Contributions are rescaled so that every dimension sums to 100 over all
    rows the model reports. Qualitative variables get the summed
    contribution of their categories.

    Returns:
        Dict with 'quantitative', 'categories' and 'qualitative' frames (Dim1..Dimk, %)
    """
    num_cols, cat_cols = split_variable_types(df_mixed)
    raw = famd.column_contributions_
    contrib = pd.DataFrame(np.asarray(raw, dtype=float), index=raw.index,
                           columns=[f"Dim{i + 1}" for i in range(raw.shape[1])])
    contrib = contrib / contrib.sum(axis=0) * 100.0
    contrib.index = [str(i) for i in contrib.index]

    labels = category_labels(df_mixed, cat_cols)
    quantitative = contrib.loc[[c for c in num_cols if c in contrib.index]]
    categories = contrib.loc[[i for i in contrib.index if i not in num_cols and i not in cat_cols and i in labels]]

    qual_rows = {}
    for col in cat_cols:
        if col in contrib.index:
            qual_rows[col] = contrib.loc[col]
        else:
            members = [i for i in categories.index if labels[i][0] == col]
            if members:
                qual_rows[col] = categories.loc[members].sum(axis=0)
    qualitative = pd.DataFrame(qual_rows).T

    if len(categories):
        categories = categories.rename(index={k: level for k, (_, level) in labels.items()})
    return {"quantitative": quantitative, "categories": categories, "qualitative": qualitative}

def eta_squared(categorical: pd.Series, continuous: pd.Series) -> float:
    """Correlation ratio: share of the continuous variance explained by the groups."""
    valid = pd.notna(categorical) & pd.notna(continuous)
    cat_clean = categorical[valid]
    cont_clean = pd.Series(np.asarray(continuous, dtype=float), index=categorical.index)[valid]
    groups = [cont_clean[cat_clean == g] for g in pd.unique(cat_clean)]
    groups = [g for g in groups if len(g) > 0]
    if len(groups) < 2:
        return 0.0

    overall_mean = cont_clean.mean()
    ss_between = sum(len(g) * (g.mean() - overall_mean) ** 2 for g in groups)
    ss_total = ((cont_clean - overall_mean) ** 2).sum()
    return float(ss_between / ss_total) if ss_total > 0 else 0.0

def variable_squared_correlations(df_mixed: pd.DataFrame, coords: pd.DataFrame) -> pd.DataFrame:
    """R² (numerical) or η² (categorical) between every variable and every dimension."""
    num_cols, cat_cols = split_variable_types(df_mixed)
    rows = {}
    for col in num_cols:
        rows[col] = [np.corrcoef(df_mixed[col], coords[d])[0, 1] ** 2 for d in coords.columns]
    for col in cat_cols:
        rows[col] = [eta_squared(df_mixed[col], coords[d]) for d in coords.columns]
    return pd.DataFrame(rows, index=coords.columns).T

def quantitative_loadings(df_mixed: pd.DataFrame, coords: pd.DataFrame) -> pd.DataFrame:
    """Signed correlations of the numerical variables with each dimension."""
    num_cols, _ = split_variable_types(df_mixed)
    combined = np.column_stack([df_mixed[num_cols].values, coords.values])
    corr = np.corrcoef(combined.T)
    n_vars = len(num_cols)
    return pd.DataFrame(corr[:n_vars, n_vars:], index=num_cols, columns=coords.columns)

def relationship_matrix(df_mixed: pd.DataFrame) -> pd.DataFrame:
    """
    Pairwise relationship strengths that FAMD balances.

    - R² between quantitative variables
    - φ² (chi² / n) between qualitative variables
    - η² between a quantitative and a qualitative variable

    The diagonal holds 1 for quantitative variables and the number of
    categories minus one (the maximum φ²) for qualitative ones.
    """
    quant_vars, qual_vars = split_variable_types(df_mixed)
    all_vars = quant_vars + qual_vars
    matrix = pd.DataFrame(index=all_vars, columns=all_vars, dtype=float)
    n = len(df_mixed)

    for var in quant_vars:
        matrix.loc[var, var] = 1.0
    for var in qual_vars:
        matrix.loc[var, var] = float(df_mixed[var].nunique() - 1)

    for i, var1 in enumerate(quant_vars):
        for var2 in quant_vars[i + 1:]:
            r, _ = pearsonr(df_mixed[var1], df_mixed[var2])
            matrix.loc[var1, var2] = matrix.loc[var2, var1] = r ** 2

    for i, var1 in enumerate(qual_vars):
        for var2 in qual_vars[i + 1:]:
            ct = pd.crosstab(df_mixed[var1], df_mixed[var2])
            chi2_stat, _, _, _ = chi2_contingency(ct, correction=False)
            matrix.loc[var1, var2] = matrix.loc[var2, var1] = chi2_stat / n

    for quant_var in quant_vars:
        for qual_var in qual_vars:
            eta2 = eta_squared(df_mixed[qual_var], df_mixed[quant_var])
            matrix.loc[quant_var, qual_var] = matrix.loc[qual_var, quant_var] = eta2

    return matrix

def plot_relationship_matrix(matrix: pd.DataFrame, title: str):
    """Heatmap with the diagonal masked white and annotated separately."""
    fig, ax = plt.subplots(figsize=(10, 8))
    plot_matrix = matrix.astype(float)
    mask = np.zeros_like(plot_matrix.values, dtype=bool)
    np.fill_diagonal(mask, True)

    sns.heatmap(plot_matrix, annot=True, fmt=".2f", mask=mask, cmap="YlOrRd", ax=ax,
                cbar_kws={"label": "Off-Diagonal Relationship Strength"})
    for i in range(len(plot_matrix)):
        ax.text(i + 0.5, i + 0.5, f"{plot_matrix.iloc[i, i]:.1f}",
                ha="center", va="center", color="black", fontweight="bold",
                bbox=dict(boxstyle="round,pad=0.2", facecolor="white", edgecolor="black"))
    ax.set_title(title)
    return fig

def plot_variables(sq_corr: pd.DataFrame, cat_cols: Sequence[str], pct: Sequence[float]):
    """Variables on Dim1/Dim2 by squared correlation; red squares are categorical."""
    fig, ax = plt.subplots(figsize=(7, 7))
    for var, (x, y) in sq_corr[["Dim1", "Dim2"]].iterrows():
        is_cat = var in cat_cols
        ax.scatter(x, y, color="red" if is_cat else "blue", marker="s" if is_cat else "o", s=60)
        ax.annotate(var, (x, y), textcoords="offset points", xytext=(5, 5),
                    color="red" if is_cat else "blue", fontsize=10)
    ax.set_xlim(0, 1.05)
    ax.set_ylim(0, 1.05)
    ax.set_xlabel(dim_label(0, pct[0]))
    ax.set_ylabel(dim_label(1, pct[1]))
    ax.set_title("Graph of variables\n(blue = quantitative, red = qualitative)")
    ax.grid(alpha=0.3)
    return fig

def describe_dimensions(split: Dict[str, pd.DataFrame], coords: pd.DataFrame, df_mixed: pd.DataFrame,
                        eig: pd.DataFrame, habillage: Sequence[str] = FAMD_HABILLAGE,
                        tag: str = "famd") -> List[str]:
    """Print top contributors per dimension and where each habillage group sits on Dim1."""
    lines = []
    for i, dim in enumerate(["Dim1", "Dim2"]):
        pct = eig["percentage_of_variance"].iloc[i]
        lines.append(f"{dim} explains {pct:.1f}% of the variance")
        for key, label in (("quantitative", "numerical"), ("categories", "categorical")):
            frame = split[key]
            if frame.empty:
                continue
            expected = 100.0 / len(frame)
            above = frame[dim][frame[dim] > expected].sort_values(ascending=False)
            if len(above):
                top = ", ".join(f"{v} ({c:.1f}%)" for v, c in above.items())
                lines.append(f"  {label} contributors above the expected line: {top}")

    for factor in habillage:
        means = coords["Dim1"].groupby(df_mixed[factor], observed=True).mean().sort_values()
        lines.append(f"{factor} along Dim1: " + " < ".join(f"{g} ({m:+.2f})" for g, m in means.items()))

    for line in lines:
        print(f"[{tag}] {line}")
    return lines

def run_famd_tutorial(output_dir: str = OUTPUT_DIR, n_components: int = FAMD_COMPONENTS,
                      seed: int = SEED) -> Dict:
    """
    Complete FAMD walkthrough on mtcars with four categorical factors.

    Args:
        output_dir: Directory for figures and tables
        n_components: Number of dimensions kept
        seed: Random seed

    Returns:
        Dictionary with the model, mixed input, coordinates, tables and file paths
    """
    tag = "famd"
    start = time.perf_counter()
    print("=" * 60)
    print("FAMD TUTORIAL (numerical + categorical)")
    print("=" * 60)

    # 1. Load and prepare the data
    mtcars_mixed = build_mixed_mtcars(load_mtcars())
    inspect_dataframe(mtcars_mixed, "mtcars_mixed")
    num_cols, cat_cols = split_variable_types(mtcars_mixed)
    print(f"[{tag}] Quantitative variables: {num_cols}")
    print(f"[{tag}] Qualitative variables: {cat_cols}")

    # 2. FAMD
    famd, coords = fit_famd(mtcars_mixed, n_components=n_components, seed=seed)
    eig = eigenvalue_table(famd)
    print(f"[{tag}] Eigenvalues:")
    print(eig.round(4).to_string())

    split = split_contributions(famd, mtcars_mixed)
    sq_corr = variable_squared_correlations(mtcars_mixed, coords)
    loadings = quantitative_loadings(mtcars_mixed, coords)
    relationships = relationship_matrix(mtcars_mixed)
    lines = describe_dimensions(split, coords, mtcars_mixed, eig, tag=tag)

    files = [
        save_table(eig, output_dir, f"{tag}_eigenvalues.csv"),
        save_table(coords, output_dir, f"{tag}_individual_coordinates.csv"),
        save_table(split["quantitative"], output_dir, f"{tag}_quantitative_contributions.csv"),
        save_table(split["qualitative"], output_dir, f"{tag}_qualitative_contributions.csv"),
        save_table(sq_corr, output_dir, f"{tag}_variable_squared_correlations.csv"),
        save_table(loadings, output_dir, f"{tag}_quantitative_loadings.csv"),
        save_table(relationships.round(3), output_dir, f"{tag}_relationship_matrix.csv"),
    ]
    if not split["categories"].empty:
        files.append(save_table(split["categories"], output_dir, f"{tag}_category_contributions.csv"))
    pct = eig["percentage_of_variance"].values

    # 3. Scree plot: focus on the first two dimensions for most insights
    ylim = (FAMD_SCREE_YLIM[0], max(FAMD_SCREE_YLIM[1], pct.max() * 1.15))
    files.append(save_figure(scree_plot(pct, "Scree plot - FAMD", ylim=ylim), output_dir, f"{tag}_scree.png"))

    # 4. Variables: numerical and categorical together, then the numerical
    # ones as a correlation circle coloured by contribution
    files.append(save_figure(plot_variables(sq_corr, cat_cols, pct), output_dir, f"{tag}_variables.png"))
    quant_contrib = split["quantitative"][["Dim1", "Dim2"]].sum(axis=1) / 2
    fig = correlation_circle(loadings[["Dim1", "Dim2"]], "Quantitative variables - FAMD",
                             dim_label(0, pct[0]), dim_label(1, pct[1]), color_values=quant_contrib)
    files.append(save_figure(fig, output_dir, f"{tag}_quantitative_variables_contrib.png"))

    # 5. Contributions: numerical variables and categories on Dim1 and Dim2.
    # Only bars above the red dashed line are worth commenting on.
    cat_frame = split["categories"] if not split["categories"].empty else split["qualitative"]
    fig, axes = plt.subplots(2, 2, figsize=(12, 9))
    for row, dim in enumerate(["Dim1", "Dim2"]):
        contribution_bar_plot(split["quantitative"][dim], f"Quantitative variables - {dim}", ax=axes[row, 0])
        contribution_bar_plot(cat_frame[dim], f"Categories - {dim}", ax=axes[row, 1])
    files.append(save_figure(fig, output_dir, f"{tag}_contributions_grid.png"))

    # 6. Individuals, then coloured by Transmission and Engine_Shape
    fig = labelled_scatter(coords, "Dim1", "Dim2", "Individuals - FAMD",
                           dim_label(0, pct[0]), dim_label(1, pct[1]), labels=coords.index,
                           color="steelblue")
    files.append(save_figure(fig, output_dir, f"{tag}_individuals.png"))

    for factor in FAMD_HABILLAGE:
        frame = coords[["Dim1", "Dim2"]].assign(**{factor: mtcars_mixed[factor]})
        fig = group_scatter(frame, "Dim1", "Dim2", factor, f"Individuals - FAMD by {factor}",
                            dim_label(0, pct[0]), dim_label(1, pct[1]), palette="Set1",
                            ellipses=True, labels=coords.index)
        files.append(save_figure(fig, output_dir, f"{tag}_individuals_{factor.lower()}.png"))

    fig = plot_relationship_matrix(
        relationships, "Variable Relationship Matrix\n(R² quantitative, φ² qualitative, η² mixed)")
    files.append(save_figure(fig, output_dir, f"{tag}_relationship_matrix.png"))

    runtime = time.perf_counter() - start
    print(f"[{tag}] Done in {runtime:.1f}s")
    return {
        "tag": tag,
        "model": famd,
        "input": mtcars_mixed,
        "coordinates": coords,
        "eigenvalues": eig,
        "contributions": split,
        "squared_correlations": sq_corr,
        "loadings": loadings,
        "relationship_matrix": relationships,
        "interpretation": lines,
        "files": files,
        "runtime_s": runtime,
    }

if __name__ == "__main__":
    run_famd_tutorial()
