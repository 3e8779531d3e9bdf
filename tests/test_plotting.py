"""Tests for the shared figure helpers."""

import os

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import pytest

from dimred_tutorials.plotting import (add_confidence_ellipse, contribution_bar_plot, dim_label, embedding_grid,
                                       group_scatter, save_figure, save_table, scatter_3d_html, scree_plot)


@pytest.fixture
def grouped_frame():
    rng = np.random.default_rng(1)
    frame = pd.DataFrame(rng.normal(size=(30, 3)), columns=["Dim1", "Dim2", "Dim3"])
    frame["Species"] = pd.Categorical(["setosa", "versicolor", "virginica"] * 10)
    return frame


def test_dim_label():
    assert dim_label(0) == "Dim1"
    assert dim_label(1, 16.49) == "Dim2 (16.5%)"


def test_save_figure_and_table(tmp_path):
    out = str(tmp_path / "nested" / "dir")
    fig, ax = plt.subplots()
    ax.plot([0, 1], [0, 1])
    path = save_figure(fig, out, "line.png")
    assert os.path.exists(path)
    assert not plt.fignum_exists(fig.number)

    table = save_table(pd.DataFrame({"a": [1, 2]}), out, "a.csv", index=False)
    assert pd.read_csv(table)["a"].tolist() == [1, 2]


def test_contribution_bars_sorted_with_expected_line():
    contrib = pd.Series({"mpg": 10.0, "wt": 40.0, "hp": 25.0, "qsec": 25.0})
    fig = contribution_bar_plot(contrib, "Dim1", top=3)
    ax = fig.axes[0]
    heights = [p.get_height() for p in ax.patches]
    assert heights == [40.0, 25.0, 25.0]
    assert ax.get_xticklabels()[0].get_text() == "wt"
    assert ax.lines[0].get_ydata()[0] == pytest.approx(25.0)


def test_scree_plot_annotations():
    fig = scree_plot([60.0, 25.0, 15.0], "Scree", ylim=(0, 60))
    ax = fig.axes[0]
    assert [t.get_text() for t in ax.texts] == ["60.0%", "25.0%", "15.0%"]
    assert ax.get_ylim() == (0, 60)


def test_confidence_ellipse_is_centred():
    fig, ax = plt.subplots()
    x = np.array([0.0, 2.0, 0.0, 2.0, 1.0])
    y = np.array([0.0, 0.0, 2.0, 2.0, 1.0])
    ellipse = add_confidence_ellipse(ax, x, y)
    assert ellipse.center == pytest.approx((1.0, 1.0))
    assert add_confidence_ellipse(ax, [0.0, 1.0], [0.0, 1.0]) is None


def test_group_scatter_with_ellipses(grouped_frame):
    fig = group_scatter(grouped_frame, "Dim1", "Dim2", "Species", "t", "x", "y", ellipses=True)
    ax = fig.axes[0]
    assert len(ax.patches) == 3
    assert ax.get_legend().get_title().get_text() == "Species"


def test_embedding_grid_hides_unused_axes(grouped_frame):
    emb = grouped_frame[["Dim1", "Dim2"]].to_numpy()
    fig = embedding_grid({"a": emb, "b": emb}, grouped_frame["Species"], "grid", ncols=3)
    assert len(fig.axes) == 2


def test_scatter_3d_html(grouped_frame, tmp_path):
    path = scatter_3d_html(grouped_frame, "Species", "3D", ["x", "y", "z"], str(tmp_path), "view.html")
    assert os.path.exists(path)
    with open(path, encoding="utf-8") as f:
        html = f.read()
    assert "plotly" in html
    assert "setosa" in html
