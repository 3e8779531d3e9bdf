"""Tests for the PCA tutorial."""

import os

import numpy as np
import pandas as pd
import pytest

from dimred_tutorials.datasets import scale_dataframe, select_columns
from dimred_tutorials.config import MTCARS_CONTINUOUS
from dimred_tutorials.pca_numerical import (compare_discrete_variants, describe_components, fit_pca,
                                            individual_contributions, individual_cos2, pca_summary,
                                            run_pca_tutorial, variable_contributions, variable_coordinates)


@pytest.fixture
def fitted(mtcars):
    scaled = scale_dataframe(select_columns(mtcars, MTCARS_CONTINUOUS))
    pca, scores = fit_pca(scaled)
    return scaled, pca, scores


def test_scores_shape(fitted):
    scaled, _, scores = fitted
    assert scores.shape == (32, 7)
    assert list(scores.columns) == [f"Dim{i}" for i in range(1, 8)]
    assert scores.index.equals(scaled.index)


def test_summary_proportions(fitted):
    _, pca, _ = fitted
    summary = pca_summary(pca)
    assert summary["proportion_of_variance"].sum() == pytest.approx(1.0)
    assert summary["cumulative_proportion"].iloc[-1] == pytest.approx(1.0)
    assert summary["proportion_of_variance"].is_monotonic_decreasing
    # Dim1 carries about 72.7% and Dim2 about 16.5% of the variance
    assert summary["proportion_of_variance"].iloc[0] == pytest.approx(0.727, abs=0.01)
    assert summary["proportion_of_variance"].iloc[1] == pytest.approx(0.165, abs=0.01)


def test_eigenvalues_add_up_to_number_of_variables(fitted):
    scaled, pca, _ = fitted
    summary = pca_summary(pca)
    assert summary["eigenvalue"].sum() == pytest.approx(scaled.shape[1])
    assert np.allclose(summary["standard_deviation"] ** 2, summary["eigenvalue"])
    # Eigenvalue above 1 (Kaiser) only for the first two components
    assert (summary["eigenvalue"] > 1).sum() == 2


def test_variable_contributions_sum_to_100(fitted):
    _, pca, _ = fitted
    contrib = variable_contributions(pca, MTCARS_CONTINUOUS)
    assert list(contrib.index) == MTCARS_CONTINUOUS
    assert np.allclose(contrib.sum(axis=0).values, 100.0)


def test_variable_coordinates_are_correlations(fitted):
    scaled, _, scores = fitted
    coords = variable_coordinates(scaled, scores)
    assert (coords.abs().values <= 1.0 + 1e-9).all()
    # Weight, displacement and cylinders load together on Dim1, opposite to mpg
    sign = np.sign(coords["Dim1"])
    assert sign["wt"] == sign["disp"] == sign["cyl"]
    assert sign["mpg"] == -sign["wt"]
    # Squared correlations of a variable over all components add up to 1
    assert np.allclose((coords ** 2).sum(axis=1).values, 1.0)


def test_individual_contributions_and_cos2(fitted):
    _, _, scores = fitted
    contrib = individual_contributions(scores)
    cos2 = individual_cos2(scores)
    assert contrib.sum() == pytest.approx(100.0)
    assert (contrib >= 0).all()
    assert ((cos2 >= 0) & (cos2 <= 1 + 1e-12)).all()
    assert individual_cos2(scores, axes=range(7)).values == pytest.approx(np.ones(32))


def test_describe_components_reports_above_average(fitted):
    scaled, pca, scores = fitted
    contrib = variable_contributions(pca, MTCARS_CONTINUOUS)
    coords = variable_coordinates(scaled, scores)
    table = describe_components(contrib, coords, pca_summary(pca))
    assert set(table["dimension"]) == {"Dim1", "Dim2"}
    assert (table["contribution_pct"] > 100.0 / 7).all()
    assert "qsec" in set(table.loc[table["dimension"] == "Dim2", "variable"])


def test_run_pca_tutorial_writes_outputs(output_dir):
    res = run_pca_tutorial(output_dir=output_dir)
    assert res["tag"] == "pca"
    assert res["input"].shape == (32, 7)
    for name in ["pca_scree.png", "pca_biplot.png", "pca_variables_contrib.png",
                 "pca_contributions_dim1_dim2.png", "pca_individuals.png",
                 "pca_individuals_contrib.png", "pca_summary.csv", "pca_variable_contributions.csv"]:
        assert os.path.exists(os.path.join(output_dir, name)), name
    assert all(os.path.exists(p) for p in res["files"])


def test_run_pca_tutorial_with_discrete_variables(output_dir):
    res = run_pca_tutorial(output_dir=output_dir, include_discrete=True)
    assert res["tag"] == "pca_all_vars"
    assert res["input"].shape == (32, 11)
    assert res["summary"].shape[0] == 11


def test_compare_discrete_variants(output_dir):
    comparison = compare_discrete_variants(output_dir=output_dir)
    assert comparison["variant"].tolist() == ["pca", "pca_all_vars"]
    assert comparison["n_variables"].tolist() == [7, 11]
    assert (comparison["dim1_dim2_cumulative_pct"] <= 100).all()
    saved = pd.read_csv(os.path.join(output_dir, "pca_variant_comparison.csv"))
    assert saved["variant"].tolist() == ["pca", "pca_all_vars"]
    assert saved["dim1_pct"].iloc[0] == pytest.approx(comparison["dim1_pct"].iloc[0])
