# Data loading, inspection, and preprocessing shared by the tutorials
from typing import Dict, List, Optional, Sequence

import numpy as np
import pandas as pd
from sklearn.datasets import load_iris as _sklearn_load_iris
from sklearn.preprocessing import StandardScaler

try:
    from .config import *
except ImportError:
    from config import *

# -------------------------- Lookup Tables --------------------------
IRIS_RENAME: Dict[str, str] = {
    "sepal length (cm)": "Sepal.Length",
    "sepal width (cm)": "Sepal.Width",
    "petal length (cm)": "Petal.Length",
    "petal width (cm)": "Petal.Width",
}

# Level labels must stay distinct across factors (FourG != FourCy)
TRANSMISSION_LEVELS: Dict[int, str] = {0: "Automatic", 1: "Manual"}
ENGINE_SHAPE_LEVELS: Dict[int, str] = {0: "V-Shaped", 1: "Straight"}
GEAR_LEVELS: Dict[int, str] = {3: "ThreeG", 4: "FourG", 5: "FiveG"}
CYLINDER_LEVELS: Dict[int, str] = {4: "FourCy", 6: "SixCy", 8: "EightCy"}

# -------------------------- Loaders --------------------------
def load_mtcars(csv_path: str = MTCARS_CSV) -> pd.DataFrame:
    """
    Load the Motor Trend car road test table (R's datasets::mtcars).

    Fuel consumption and ten aspects of design and performance for 32
    automobiles (1973-74 models):

    - mpg: Miles per gallon (numerical)
    - cyl: Number of cylinders (numerical)
    - disp: Displacement (numerical)
    - hp: Gross horsepower (numerical)
    - drat: Rear axle ratio (numerical)
    - wt: Weight, 1000 lbs (numerical)
    - qsec: 1/4 mile time (numerical)
    - vs: Engine shape (0 = V-shaped, 1 = Straight) (categorical)
    - am: Transmission (0 = Automatic, 1 = Manual) (categorical)
    - gear: Number of forward gears (numerical)
    - carb: Number of carburetors (numerical)

    Returns:
        pd.DataFrame: 32 x 11 float table indexed by car model
    """
    df = pd.read_csv(csv_path, index_col="model")
    df.index.name = None
    return df.astype("float64")

def load_iris() -> pd.DataFrame:
    """
    Load Fisher's iris measurements with R's column names.

    Returns:
        pd.DataFrame: 150 rows, four float measurements plus a categorical 'Species'
    """
    bunch = _sklearn_load_iris(as_frame=True)
    df = bunch.frame.rename(columns=IRIS_RENAME)
    names = list(bunch.target_names)
    df[IRIS_LABEL] = pd.Categorical.from_codes(df.pop("target").astype(int), categories=names)
    return df[IRIS_FEATURES + [IRIS_LABEL]]

# -------------------------- Inspection --------------------------
def inspect_dataframe(df: pd.DataFrame, name: str, n_head: int = 6) -> pd.DataFrame:
    """Print the first rows and a per-column structure summary."""
    print(f"\n[{name}] Preview ({n_head} rows):")
    print(df.head(n_head).to_string())

    rows = []
    for col in df.columns:
        series = df[col]
        preview = series.head(4).tolist()
        rows.append({
            "column": col,
            "dtype": str(series.dtype),
            "n_unique": int(series.nunique(dropna=False)),
            "n_missing": int(series.isna().sum()),
            "preview": ", ".join(str(v) for v in preview),
        })
    structure = pd.DataFrame(rows)

    print(f"\n[{name}] Structure: {df.shape[0]} obs. of {df.shape[1]} variables")
    print(structure.to_string(index=False))
    return structure

# -------------------------- Column Selection --------------------------
def continuous_mtcars_columns(include_discrete: bool = False) -> List[str]:
    """Continuous mtcars variables; optionally add the binary/discrete ones (try both)."""
    cols = MTCARS_CONTINUOUS[:]
    if include_discrete:
        cols += MTCARS_DISCRETE
    return cols

def select_columns(df: pd.DataFrame, columns: Sequence[str]) -> pd.DataFrame:
    """Ordered column subset; raises KeyError naming every missing column."""
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise KeyError(f"Columns not found: {missing}")
    return df[list(columns)].copy()

def drop_columns(df: pd.DataFrame, columns: Sequence[str]) -> pd.DataFrame:
    """Every column except the ones listed."""
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise KeyError(f"Columns not found: {missing}")
    return df.drop(columns=list(columns))

# -------------------------- Preprocessing --------------------------
def scale_dataframe(df: pd.DataFrame) -> pd.DataFrame:
    """
    Standardise every column to zero mean and unit variance.

    Distance- and variance-based methods are sensitive to the scale of the
    variables; scaling makes every variable contribute equally.

    Args:
        df: Numeric dataframe

    Returns:
        Scaled dataframe with the same index and columns

    Raises:
        ValueError: If any column is not numeric
    """
    non_numeric = [c for c in df.columns if not pd.api.types.is_numeric_dtype(df[c])]
    if non_numeric:
        raise ValueError(f"Scaling requires numerical data only; non-numeric columns: {non_numeric}")

    scaler = StandardScaler()
    scaled = scaler.fit_transform(df.astype("float64"))
    return pd.DataFrame(scaled, index=df.index, columns=df.columns)

def drop_duplicate_rows(df: pd.DataFrame, subset: Optional[Sequence[str]] = None) -> pd.DataFrame:
    """Remove exact duplicate rows, keeping the first occurrence."""
    deduped = df.drop_duplicates(subset=list(subset) if subset is not None else None, keep="first")
    n_dropped = len(df) - len(deduped)
    if n_dropped:
        print(f"Removed {n_dropped} duplicate row(s): {len(df)} -> {len(deduped)}")
    return deduped

def assert_unique_rows(matrix) -> None:
    """
    Raise if a numeric matrix still holds identical rows.

    Neighbour-based embeddings (t-SNE, UMAP) fail or misbehave on exact
    duplicates. Either deduplicate the raw table first or add an 'ID'
    column that makes each row unique.
    """
    values = np.asarray(matrix, dtype=float)
    n_unique = np.unique(values, axis=0).shape[0]
    if n_unique != values.shape[0]:
        raise ValueError(
            f"Input contains {values.shape[0] - n_unique} duplicate row(s); "
            f"remove duplicates before embedding"
        )

def prepare_iris_features(iris: pd.DataFrame):
    """
    Deduplicate iris on the raw table, drop 'Species', and scale.

    Duplicates are removed before the label is dropped so that the
    species labels stay aligned with the remaining rows.

    Returns:
        Tuple of (deduplicated iris including Species, scaled measurements)
    """
    iris_unique = drop_duplicate_rows(iris)
    iris_data = drop_columns(iris_unique, [IRIS_LABEL])
    iris_scaled = scale_dataframe(iris_data)
    assert_unique_rows(iris_scaled)
    return iris_unique, iris_scaled

def build_mixed_mtcars(df: pd.DataFrame) -> pd.DataFrame:
    """
    Add categorical factors to mtcars and drop the columns they replace.

    - Transmission: Automatic or Manual (from 'am')
    - Engine_Shape: V-Shaped or Straight (from 'vs')
    - Gears: ThreeG, FourG, FiveG (from 'gear')
    - Cylinders: FourCy, SixCy, EightCy (from 'cyl')

    Args:
        df: Raw mtcars dataframe

    Returns:
        Mixed dataframe: float numerics plus four categorical columns
    """
    factors = {
        "Transmission": ("am", TRANSMISSION_LEVELS),
        "Engine_Shape": ("vs", ENGINE_SHAPE_LEVELS),
        "Gears": ("gear", GEAR_LEVELS),
        "Cylinders": ("cyl", CYLINDER_LEVELS),
    }
    mixed = df.copy()
    for name, (source, levels) in factors.items():
        codes = mixed[source].astype(int)
        unknown = sorted(set(codes) - set(levels))
        if unknown:
            raise ValueError(f"Unexpected values in '{source}': {unknown}")
        mixed[name] = pd.Categorical(codes.map(levels), categories=list(levels.values()))

    # Exclude redundant variables ('am', 'vs', 'gear', and 'cyl')
    mixed = mixed.drop(columns=[source for source, _ in factors.values()])

    num_cols = [c for c in mixed.columns if c not in factors]
    mixed[num_cols] = mixed[num_cols].astype("float64")
    return mixed

def split_variable_types(df: pd.DataFrame):
    """Return (numeric_columns, categorical_columns) preserving column order."""
    cat_cols = [c for c in df.columns if df[c].dtype == "category" or df[c].dtype == object]
    num_cols = [c for c in df.columns if c not in cat_cols]
    return num_cols, cat_cols
