"""Tests for the MDS tutorial."""

import os

import numpy as np
import pytest

from dimred_tutorials.config import MTCARS_MDS
from dimred_tutorials.datasets import scale_dataframe, select_columns
from dimred_tutorials.mds import (distance_matrix, fit_mds, mds_frame, nearest_neighbours, run_mds_tutorial,
                                  shepard_table)


@pytest.fixture
def scaled(mtcars):
    return scale_dataframe(select_columns(mtcars, MTCARS_MDS))


def test_distance_matrix(scaled):
    d = distance_matrix(scaled)
    assert d.shape == (32, 32)
    assert np.allclose(d.values, d.values.T)
    assert np.allclose(np.diag(d.values), 0.0)
    assert (d.values >= 0).all()


def test_fit_mds_and_frame(scaled):
    _, points = fit_mds(distance_matrix(scaled))
    frame = mds_frame(points, scaled.index)
    assert points.shape == (32, 2)
    assert list(frame.columns) == ["Dim1", "Dim2", "Car"]
    assert frame["Car"].tolist() == list(scaled.index)


def test_fit_mds_uses_the_distance_matrix(scaled):
    d = distance_matrix(scaled)
    mds, _ = fit_mds(d)
    assert np.allclose(mds.dissimilarity_matrix_, d.values)


def test_mds_on_distances_of_a_planar_cloud_recovers_them(scaled):
    # Distances between 2-D points are embedded exactly (up to rotation)
    planar = scaled[["mpg", "wt"]]
    d = distance_matrix(planar)
    _, points = fit_mds(d)
    _, stress1, rho = shepard_table(d, points)
    assert stress1 < 0.01
    assert rho == pytest.approx(1.0, abs=1e-3)


def test_fit_mds_is_reproducible(scaled):
    _, a = fit_mds(distance_matrix(scaled), seed=7)
    _, b = fit_mds(distance_matrix(scaled), seed=7)
    assert np.allclose(a, b)


def test_nearest_neighbours(scaled):
    table = nearest_neighbours(distance_matrix(scaled), k=3)
    assert len(table) == 32
    assert {"item", "neighbour_1", "distance_1", "neighbour_3"} <= set(table.columns)
    row = table.set_index("item").loc["Merc 280"]
    assert row["neighbour_1"] == "Merc 280C"
    assert (table["neighbour_1"] != table["item"]).all()
    assert (table["distance_1"] <= table["distance_2"]).all()


def test_shepard_table(scaled):
    d = distance_matrix(scaled)
    _, points = fit_mds(distance_matrix(scaled))
    pairs, stress1, rho = shepard_table(d, points)
    assert len(pairs) == 32 * 31 // 2
    assert 0.0 <= stress1 < 1.0
    assert rho > 0.5


def test_shepard_table_perfect_embedding(scaled):
    d = distance_matrix(scaled)
    pairs, stress1, rho = shepard_table(d, scaled.values)
    assert stress1 == pytest.approx(0.0, abs=1e-10)
    assert rho == pytest.approx(1.0)
    assert np.allclose(pairs["original_distance"], pairs["embedded_distance"])


def test_run_mds_tutorial_writes_outputs(output_dir):
    res = run_mds_tutorial(output_dir=output_dir)
    assert res["coordinates"].shape == (32, 3)
    assert np.allclose(res["model"].dissimilarity_matrix_, res["distances"].values)
    assert 0.0 <= res["quality"]["trustworthiness"] <= 1.0
    for name in ["mds_distance_matrix.csv", "mds_coordinates.csv", "mds_nearest_neighbours.csv",
                 "mds_shepard.csv", "mds_mtcars.png", "mds_shepard.png"]:
        assert os.path.exists(os.path.join(output_dir, name)), name
