"""Tests for the FAMD tutorial."""

import os
from types import SimpleNamespace

import numpy as np
import pandas as pd
import pytest

from dimred_tutorials.famd_mixed import (eta_squared, eigenvalue_table, fit_famd, quantitative_loadings,
                                         relationship_matrix, run_famd_tutorial, split_contributions,
                                         variable_squared_correlations)

NUM_COLS = ["mpg", "disp", "hp", "drat", "wt", "qsec", "carb"]
CAT_COLS = ["Transmission", "Engine_Shape", "Gears", "Cylinders"]


@pytest.fixture
def fitted(mixed_mtcars):
    famd, coords = fit_famd(mixed_mtcars)
    return famd, coords


def test_coordinates_shape(fitted, mixed_mtcars):
    _, coords = fitted
    assert coords.shape == (32, 5)
    assert list(coords.columns) == ["Dim1", "Dim2", "Dim3", "Dim4", "Dim5"]
    assert coords.index.equals(mixed_mtcars.index)


def test_eigenvalue_table(fitted):
    famd, _ = fitted
    eig = eigenvalue_table(famd)
    assert eig.shape == (5, 3)
    assert (eig["eigenvalue"] > 0).all()
    assert eig["eigenvalue"].is_monotonic_decreasing
    assert eig["cumulative_percentage_of_variance"].is_monotonic_increasing
    assert eig["cumulative_percentage_of_variance"].iloc[-1] <= 100.0 + 1e-6


def test_split_contributions(fitted, mixed_mtcars):
    famd, _ = fitted
    split = split_contributions(famd, mixed_mtcars)
    assert list(split["quantitative"].index) == NUM_COLS
    assert set(split["qualitative"].index) == set(CAT_COLS)
    total = split["quantitative"].sum(axis=0) + split["qualitative"].sum(axis=0)
    assert np.allclose(total.values, 100.0)
    levels = {"Automatic", "Manual", "V-Shaped", "Straight", "ThreeG", "FourG", "FiveG",
              "FourCy", "SixCy", "EightCy"}
    assert set(split["categories"].index) == levels
    # Each factor carries the summed contribution of its levels
    gears = split["categories"].loc[["ThreeG", "FourG", "FiveG"]].sum(axis=0)
    assert np.allclose(gears.values, split["qualitative"].loc["Gears"].values)


def test_squared_correlations_bounded(fitted, mixed_mtcars):
    _, coords = fitted
    sq = variable_squared_correlations(mixed_mtcars, coords)
    assert set(sq.index) == set(NUM_COLS + CAT_COLS)
    assert ((sq.values >= 0) & (sq.values <= 1 + 1e-9)).all()


def test_quantitative_loadings(fitted, mixed_mtcars):
    _, coords = fitted
    loadings = quantitative_loadings(mixed_mtcars, coords)
    assert list(loadings.index) == NUM_COLS
    assert (loadings.abs().values <= 1 + 1e-9).all()
    # mpg and weight sit on opposite sides of the first dimension
    assert np.sign(loadings.loc["mpg", "Dim1"]) == -np.sign(loadings.loc["wt", "Dim1"])


def test_eta_squared_extremes():
    groups = pd.Series(["a", "a", "b", "b"])
    assert eta_squared(groups, pd.Series([1.0, 1.0, 5.0, 5.0])) == pytest.approx(1.0)
    assert eta_squared(groups, pd.Series([1.0, 5.0, 1.0, 5.0])) == pytest.approx(0.0)
    assert eta_squared(pd.Series(["a", "a"]), pd.Series([1.0, 2.0])) == 0.0


def test_relationship_matrix(mixed_mtcars):
    matrix = relationship_matrix(mixed_mtcars)
    assert list(matrix.index) == NUM_COLS + CAT_COLS
    assert np.allclose(matrix.values, matrix.values.T)
    assert matrix.loc["mpg", "mpg"] == 1.0
    assert matrix.loc["Transmission", "Transmission"] == 1.0
    assert matrix.loc["Gears", "Gears"] == 2.0
    assert matrix.loc["Cylinders", "Cylinders"] == 2.0
    # R² between mpg and weight (r = -0.868)
    assert matrix.loc["mpg", "wt"] == pytest.approx(0.868 ** 2, abs=0.005)
    off_diag = matrix.loc[NUM_COLS, CAT_COLS].values
    assert ((off_diag >= 0) & (off_diag <= 1)).all()


def test_run_famd_tutorial_writes_outputs(output_dir):
    res = run_famd_tutorial(output_dir=output_dir)
    assert res["coordinates"].shape == (32, 5)
    for name in ["famd_scree.png", "famd_variables.png", "famd_quantitative_variables_contrib.png",
                 "famd_contributions_grid.png", "famd_individuals.png",
                 "famd_individuals_transmission.png", "famd_individuals_engine_shape.png",
                 "famd_relationship_matrix.png", "famd_eigenvalues.csv"]:
        assert os.path.exists(os.path.join(output_dir, name)), name
    assert any("Transmission along Dim1" in line for line in res["interpretation"])


@pytest.mark.parametrize("prefixed", [True, False])
def test_split_contributions_groups_levels_by_factor(prefixed):
    df = pd.DataFrame({
        "x": [1.0, 2.0, 3.0, 4.0],
        "Shape": pd.Categorical(["Round", "Flat", "Round", "Flat"]),
    })
    rows = ["x", "Shape_Flat", "Shape_Round"] if prefixed else ["x", "Flat", "Round"]
    model = SimpleNamespace(column_contributions_=pd.DataFrame(
        [[0.5, 0.2], [0.3, 0.2], [0.2, 0.6]], index=rows, columns=[0, 1]))
    split = split_contributions(model, df)
    assert list(split["categories"].index) == ["Flat", "Round"]
    assert split["qualitative"].loc["Shape", "Dim1"] == pytest.approx(50.0)
    assert split["quantitative"].loc["x", "Dim2"] == pytest.approx(20.0)
