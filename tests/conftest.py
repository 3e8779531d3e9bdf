"""Pytest configuration and fixtures for the tutorial tests."""

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import pytest

from dimred_tutorials.datasets import build_mixed_mtcars, load_iris, load_mtcars, prepare_iris_features


@pytest.fixture
def mtcars():
    """Raw mtcars table."""
    return load_mtcars()


@pytest.fixture
def mixed_mtcars(mtcars):
    """mtcars with the four categorical factors."""
    return build_mixed_mtcars(mtcars)


@pytest.fixture
def iris():
    """Raw iris table."""
    return load_iris()


@pytest.fixture
def iris_prepared(iris):
    """(deduplicated iris, scaled measurements)."""
    return prepare_iris_features(iris)


@pytest.fixture
def output_dir(tmp_path):
    """Temporary output directory for figures and tables."""
    path = tmp_path / "outputs"
    return str(path)


@pytest.fixture(autouse=True)
def close_figures():
    """Make sure no test leaves figures open."""
    yield
    plt.close("all")
