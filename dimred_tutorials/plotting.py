# Figure helpers shared by the tutorials
import os
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
import seaborn as sns
import plotly.express as px
from matplotlib.colors import LinearSegmentedColormap
from matplotlib.patches import Ellipse
from scipy.stats import chi2

try:
    from .config import *
except ImportError:
    from config import *

def gradient_cmap() -> LinearSegmentedColormap:
    """Low-to-high contribution colour map (#00AFBB -> #E7B800 -> #FC4E07)."""
    return LinearSegmentedColormap.from_list("contrib_gradient", GRADIENT_COLORS)

def save_figure(fig, output_dir: str, filename: str) -> str:
    """Save a matplotlib figure at the configured DPI and close it."""
    os.makedirs(output_dir, exist_ok=True)
    path = os.path.join(output_dir, filename)
    fig.tight_layout()
    fig.savefig(path, dpi=DPI, bbox_inches="tight")
    plt.close(fig)
    print(f"  - Saved figure: {path}")
    return path

def save_table(df: pd.DataFrame, output_dir: str, filename: str, index: bool = True) -> str:
    """Write a result table as CSV."""
    os.makedirs(output_dir, exist_ok=True)
    path = os.path.join(output_dir, filename)
    df.to_csv(path, index=index)
    print(f"  - Saved table: {path}")
    return path

def dim_label(i: int, pct: Optional[float] = None) -> str:
    """Axis label 'Dim1 (72.7%)' for 0-based component i."""
    if pct is None:
        return f"Dim{i + 1}"
    return f"Dim{i + 1} ({pct:.1f}%)"

# -------------------------- Variance --------------------------
def scree_plot(percentages: Sequence[float], title: str, ylim: Optional[Tuple[float, float]] = None,
               max_components: int = 10):
    """Bar + line scree plot with percentage labels above every bar."""
    pct = np.asarray(percentages, dtype=float)[:max_components]
    dims = np.arange(1, len(pct) + 1)

    fig, ax = plt.subplots(figsize=(7, 4.5))
    ax.bar(dims, pct, color="steelblue", edgecolor="steelblue")
    ax.plot(dims, pct, color="black", marker="o")
    for d, p in zip(dims, pct):
        ax.annotate(f"{p:.1f}%", (d, p), textcoords="offset points", xytext=(0, 6), ha="center")

    ax.set_xticks(dims)
    ax.set_xlabel("Dimensions")
    ax.set_ylabel("Percentage of explained variances")
    ax.set_title(title)
    if ylim is not None:
        ax.set_ylim(*ylim)
    else:
        ax.set_ylim(0, pct.max() * 1.15)
    ax.grid(axis="y", alpha=0.3)
    return fig

# -------------------------- Contributions --------------------------
def contribution_bar_plot(contrib: pd.Series, title: str, top: int = PCA_TOP_CONTRIB,
                          expected: Optional[float] = None, ax=None):
    """
    Contribution bars sorted in decreasing order.

    The red dashed line is the expected average contribution if all
    variables contributed equally; variables above it play a significant
    role in defining the component.

    Args:
        contrib: Contribution (%) per variable for one dimension
        title: Plot title
        top: Number of bars to draw
        expected: Reference line; defaults to 100 / number of variables
        ax: Axes to draw on (a new figure is created when None)

    Returns:
        The matplotlib figure
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=(6, 4.5))
    else:
        fig = ax.figure

    if expected is None:
        expected = 100.0 / len(contrib)
    ordered = contrib.sort_values(ascending=False).head(top)

    ax.bar(range(len(ordered)), ordered.values, color="steelblue")
    ax.axhline(expected, color=EXPECTED_LINE_COLOR, linestyle="--", linewidth=1)
    ax.set_xticks(range(len(ordered)))
    ax.set_xticklabels([str(i) for i in ordered.index], rotation=45, ha="right")
    ax.set_ylabel("Contributions (%)")
    ax.set_title(title)
    ax.grid(axis="y", alpha=0.3)
    return fig

def correlation_circle(coords: pd.DataFrame, title: str, xlabel: str, ylabel: str,
                       color_values: Optional[pd.Series] = None, color_label: str = "contrib",
                       ax=None):
    """Variables as arrows from the origin inside the unit circle."""
    if ax is None:
        fig, ax = plt.subplots(figsize=(7, 7))
    else:
        fig = ax.figure

    cmap = gradient_cmap()
    if color_values is not None:
        norm = plt.Normalize(vmin=float(color_values.min()), vmax=float(color_values.max()))
    for var in coords.index:
        x, y = coords.loc[var].iloc[0], coords.loc[var].iloc[1]
        color = cmap(norm(color_values.loc[var])) if color_values is not None else "black"
        ax.annotate("", xy=(x, y), xytext=(0, 0),
                    arrowprops=dict(arrowstyle="->", color=color, lw=1.5))
        ax.text(x * 1.1, y * 1.1, str(var), color=color, fontsize=9, ha="center", va="center")

    circle = plt.Circle((0, 0), 1, fill=False, color="grey", linestyle="-", alpha=0.6)
    ax.add_patch(circle)
    ax.axhline(0, color="k", linestyle="--", alpha=0.4)
    ax.axvline(0, color="k", linestyle="--", alpha=0.4)
    ax.set_xlim(-1.15, 1.15)
    ax.set_ylim(-1.15, 1.15)
    ax.set_aspect("equal")
    ax.set_xlabel(xlabel)
    ax.set_ylabel(ylabel)
    ax.set_title(title)

    if color_values is not None:
        sm = plt.cm.ScalarMappable(cmap=cmap, norm=norm)
        sm.set_array([])
        fig.colorbar(sm, ax=ax, label=color_label, shrink=0.8)
    return fig

# -------------------------- Scatter Plots --------------------------
def labelled_scatter(frame: pd.DataFrame, x: str, y: str, title: str, xlabel: str, ylabel: str,
                     labels: Optional[Sequence[str]] = None, color="blue",
                     color_values: Optional[Sequence[float]] = None, color_label: str = "",
                     ax=None):
    """Points with a text label just above each one; optional gradient colouring."""
    if ax is None:
        fig, ax = plt.subplots(figsize=(10, 7))
    else:
        fig = ax.figure

    if color_values is not None:
        sc = ax.scatter(frame[x], frame[y], c=color_values, cmap=gradient_cmap(), s=30)
        fig.colorbar(sc, ax=ax, label=color_label)
    else:
        ax.scatter(frame[x], frame[y], color=color, s=30)

    if labels is not None:
        for xi, yi, lab in zip(frame[x], frame[y], labels):
            ax.annotate(str(lab), (xi, yi), textcoords="offset points", xytext=(0, 6),
                        ha="center", fontsize=8)

    ax.axhline(0, color="k", linestyle="--", alpha=0.3)
    ax.axvline(0, color="k", linestyle="--", alpha=0.3)
    ax.set_xlabel(xlabel)
    ax.set_ylabel(ylabel)
    ax.set_title(title)
    ax.grid(alpha=0.3)
    return fig

def add_confidence_ellipse(ax, x, y, level: float = ELLIPSE_LEVEL, color="black"):
    """Draw the normal-theory confidence ellipse of a 2D point cloud."""
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    if len(x) < 3:
        return None
    cov = np.cov(x, y)
    eigvals, eigvecs = np.linalg.eigh(cov)
    order = eigvals.argsort()[::-1]
    eigvals, eigvecs = eigvals[order], eigvecs[:, order]
    angle = np.degrees(np.arctan2(eigvecs[1, 0], eigvecs[0, 0]))
    scale = np.sqrt(chi2.ppf(level, df=2))
    width, height = 2 * scale * np.sqrt(np.clip(eigvals, 0, None))
    ellipse = Ellipse((x.mean(), y.mean()), width, height, angle=angle,
                      facecolor=color, edgecolor=color, alpha=0.15, linewidth=1.5)
    ax.add_patch(ellipse)
    return ellipse

def group_scatter(frame: pd.DataFrame, x: str, y: str, hue: str, title: str, xlabel: str,
                  ylabel: str, palette=SPECIES_PALETTE, ellipses: bool = False,
                  labels: Optional[Sequence[str]] = None, ax=None):
    """Scatter coloured by a categorical column, optionally with per-group ellipses."""
    if ax is None:
        fig, ax = plt.subplots(figsize=(9, 7))
    else:
        fig = ax.figure

    groups = list(frame[hue].cat.categories) if frame[hue].dtype == "category" else sorted(frame[hue].unique())
    colors = dict(zip(groups, sns.color_palette(palette, n_colors=max(len(groups), 3))))

    sns.scatterplot(data=frame, x=x, y=y, hue=hue, hue_order=groups, palette=colors, s=40, ax=ax)
    if ellipses:
        for g in groups:
            sub = frame[frame[hue] == g]
            add_confidence_ellipse(ax, sub[x], sub[y], color=colors[g])
            ax.scatter(sub[x].mean(), sub[y].mean(), color=colors[g], marker="D", s=80, edgecolors="black")
    if labels is not None:
        for xi, yi, lab in zip(frame[x], frame[y], labels):
            ax.annotate(str(lab), (xi, yi), textcoords="offset points", xytext=(0, 5),
                        ha="center", fontsize=7)

    ax.set_xlabel(xlabel)
    ax.set_ylabel(ylabel)
    ax.set_title(title)
    ax.legend(title=hue)
    sns.despine(ax=ax)
    return fig

def embedding_grid(embeddings: Dict[str, np.ndarray], groups: Sequence, title: str,
                   palette=SPECIES_PALETTE, ncols: int = 3):
    """Small multiples of 2D embeddings coloured by group."""
    n = len(embeddings)
    ncols = min(ncols, n)
    nrows = int(np.ceil(n / ncols))
    fig, axes = plt.subplots(nrows, ncols, figsize=(4.5 * ncols, 4 * nrows), squeeze=False)

    groups = pd.Series(groups).astype(str).to_numpy()
    levels = list(dict.fromkeys(groups))
    colors = dict(zip(levels, sns.color_palette(palette, n_colors=max(len(levels), 3))))

    for ax, (name, emb) in zip(axes.ravel(), embeddings.items()):
        for lev in levels:
            mask = groups == lev
            ax.scatter(emb[mask, 0], emb[mask, 1], s=10, color=colors[lev], label=lev)
        ax.set_title(name, fontsize=10)
        ax.set_xticks([])
        ax.set_yticks([])
    for ax in axes.ravel()[n:]:
        ax.axis("off")

    axes.ravel()[0].legend(fontsize=8)
    fig.suptitle(title)
    return fig

# -------------------------- 3D Views --------------------------
def scatter_3d_static(frame: pd.DataFrame, hue: str, title: str, axis_titles: List[str],
                      colors: Sequence[str] = SPECIES_COLORS):
    """Static 3D scatter (Dim1, Dim2, Dim3) coloured by group."""
    fig = plt.figure(figsize=(8, 7))
    ax = fig.add_subplot(111, projection="3d")
    groups = list(frame[hue].cat.categories) if frame[hue].dtype == "category" else sorted(frame[hue].unique())
    for g, c in zip(groups, colors):
        sub = frame[frame[hue] == g]
        ax.scatter(sub["Dim1"], sub["Dim2"], sub["Dim3"], color=c, s=20, label=str(g))
    ax.set_xlabel(axis_titles[0])
    ax.set_ylabel(axis_titles[1])
    ax.set_zlabel(axis_titles[2])
    ax.set_title(title)
    ax.legend(title=hue)
    return fig

def scatter_3d_html(frame: pd.DataFrame, hue: str, title: str, axis_titles: List[str],
                    output_dir: str, filename: str, colors: Sequence[str] = SPECIES_COLORS) -> str:
    """Interactive 3D scatter written as a standalone HTML page (plotly)."""
    os.makedirs(output_dir, exist_ok=True)
    path = os.path.join(output_dir, filename)

    plot_df = frame.copy()
    plot_df[hue] = plot_df[hue].astype(str)
    fig = px.scatter_3d(plot_df, x="Dim1", y="Dim2", z="Dim3", color=hue,
                        color_discrete_sequence=list(colors), title=title)
    fig.update_traces(marker=dict(size=5))
    fig.update_layout(scene=dict(
        xaxis=dict(title=axis_titles[0]),
        yaxis=dict(title=axis_titles[1]),
        zaxis=dict(title=axis_titles[2]),
    ))
    fig.write_html(path, include_plotlyjs="cdn")
    print(f"  - Saved interactive figure: {path}")
    return path
