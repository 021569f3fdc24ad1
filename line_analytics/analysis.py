"""Grouped downtime summaries and the random-forest downtime model.

Both entry points are read-only over a production table (as produced by
``ProductionSimulator.run``) and fail fast on malformed input.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from pandas.api.types import is_bool_dtype, is_numeric_dtype
from sklearn.ensemble import RandomForestRegressor
from sklearn.metrics import mean_squared_error, r2_score

from line_analytics.errors import InsufficientData, InvalidArgument, MalformedInput
from line_analytics.production_sim import LINE_IDS, RANDOM_SEED

HIGH_DOWNTIME_THRESHOLD = 5.0
SUMMARY_FIELDS = ("Downtime_Hours", "Defect_Rate")

TARGET = "Downtime_Hours"
PREDICTORS = ["Line_ID", "Defect_Rate", "Energy_Usage_kWh"]
NUMERIC_PREDICTORS = ["Defect_Rate", "Energy_Usage_kWh"]
LINE_PREFIX = "Line_ID_"

MIN_RECORDS = 2
DEFAULT_TREES = 100


# ---------------------------------------------------------------------------
# Input checks
# ---------------------------------------------------------------------------


def _require_columns(table: pd.DataFrame, columns: Iterable[str]) -> None:
    if not isinstance(table, pd.DataFrame):
        raise MalformedInput(f"expected a DataFrame, got {type(table).__name__}")
    missing = [c for c in dict.fromkeys(columns) if c not in table.columns]
    if missing:
        raise MalformedInput(f"table is missing required columns: {', '.join(missing)}")


def _require_numeric(table: pd.DataFrame, columns: Iterable[str]) -> None:
    for col in dict.fromkeys(columns):
        series = table[col]
        if is_bool_dtype(series) or not is_numeric_dtype(series):
            raise MalformedInput(f"column {col!r} must be numeric, got dtype {series.dtype}")
        if series.isna().any():
            raise MalformedInput(f"column {col!r} contains missing values")


def _check_int(name: str, value, minimum: int) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise InvalidArgument(f"{name} must be an integer, got {value!r}")
    if value < minimum:
        raise InvalidArgument(f"{name} must be >= {minimum}, got {value}")
    return int(value)


# ---------------------------------------------------------------------------
# Grouped summary
# ---------------------------------------------------------------------------


def summarize_high_downtime(
    table: pd.DataFrame,
    threshold: float = HIGH_DOWNTIME_THRESHOLD,
    fields: Sequence[str] = SUMMARY_FIELDS,
) -> pd.DataFrame:
    """Mean of ``fields`` per line over records with downtime above ``threshold``.

    Lines with no qualifying records are absent from the result rather than
    reported as empty rows. Output columns are ``Line_ID`` followed by
    ``Mean_<field>`` for each requested field, sorted by line.
    """
    fields = list(dict.fromkeys(fields))
    if not fields:
        raise InvalidArgument("at least one field is required for the summary")

    _require_columns(table, ["Line_ID", "Downtime_Hours", *fields])
    if table.empty:
        raise MalformedInput("cannot summarize an empty table")
    _require_numeric(table, ["Downtime_Hours", *fields])
    if table["Line_ID"].isna().any():
        raise MalformedInput("column 'Line_ID' contains missing values")

    high = table[table["Downtime_Hours"] > threshold]
    summary = high.groupby("Line_ID", sort=True, observed=True)[fields].mean().reset_index()
    return summary.rename(columns={f: f"Mean_{f}" for f in fields})


# ---------------------------------------------------------------------------
# Random-forest downtime model
# ---------------------------------------------------------------------------


def _design_matrix(table: pd.DataFrame) -> pd.DataFrame:
    """One-hot encode ``Line_ID`` over the fixed line set and append numerics."""
    unknown = sorted(set(table.loc[~table["Line_ID"].isin(LINE_IDS), "Line_ID"].astype(str)))
    if unknown:
        raise MalformedInput(f"unknown Line_ID values: {', '.join(unknown)}")

    lines = pd.Categorical(table["Line_ID"], categories=LINE_IDS)
    dummies = pd.get_dummies(lines, prefix="Line_ID", dtype=float)
    dummies.index = table.index
    return pd.concat([dummies, table[NUMERIC_PREDICTORS].astype(float)], axis=1)


def _out_of_bag_predictions(model: RandomForestRegressor, X: np.ndarray) -> Optional[np.ndarray]:
    """Average each record's predictions over the trees that never drew it.

    Returns None when some record was drawn by every tree.
    """
    totals = np.zeros(len(X))
    counts = np.zeros(len(X))
    for tree, drawn in zip(model.estimators_, model.estimators_samples_):
        unsampled = np.ones(len(X), dtype=bool)
        unsampled[drawn] = False
        if unsampled.any():
            totals[unsampled] += tree.predict(X[unsampled])
            counts[unsampled] += 1
    if (counts == 0).any():
        return None
    return totals / counts


def _fold_importances(feature_names: List[str], scores: np.ndarray) -> List[Tuple[str, float]]:
    """Sum dummy-column importances back into their source predictor, ranked."""
    totals = {p: 0.0 for p in PREDICTORS}
    for name, score in zip(feature_names, scores):
        source = "Line_ID" if name.startswith(LINE_PREFIX) else name
        totals[source] += float(score)
    return sorted(totals.items(), key=lambda kv: (-kv[1], kv[0]))


@dataclass
class DowntimeModel:
    model: RandomForestRegressor
    feature_names: List[str]
    variance_explained: float
    mean_squared_residuals: float
    fit_score_source: str
    importances: List[Tuple[str, float]]
    n_trees: int
    seed: int

    def predict(self, table: pd.DataFrame) -> np.ndarray:
        _require_columns(table, PREDICTORS)
        _require_numeric(table, NUMERIC_PREDICTORS)
        X = _design_matrix(table)[self.feature_names]
        return self.model.predict(X)

    def training_r2(self, table: pd.DataFrame) -> float:
        """In-sample R²; optimistic compared to ``variance_explained``."""
        _require_columns(table, [TARGET])
        return float(r2_score(table[TARGET], self.predict(table)))


def fit_downtime_model(
    table: pd.DataFrame,
    n_trees: int = DEFAULT_TREES,
    seed: int = RANDOM_SEED,
) -> DowntimeModel:
    """Fit a random forest predicting downtime from line, defect rate and energy.

    The fit score is the out-of-bag R², i.e. the share of downtime variance
    explained by trees that did not see a record. When some record was drawn
    by every tree (tiny tables, few trees) there is no out-of-bag prediction
    for it, and the score falls back to the in-sample R² with
    ``fit_score_source`` set to ``"in_sample"``. ``seed`` drives bootstrap
    sampling and split selection, so identical inputs give identical results.
    """
    _require_columns(table, [TARGET, *PREDICTORS])
    n_trees = _check_int("n_trees", n_trees, 1)
    seed = _check_int("seed", seed, 0)

    if len(table) < MIN_RECORDS:
        raise InsufficientData(
            f"need at least {MIN_RECORDS} records to fit a model, got {len(table)}"
        )
    _require_numeric(table, [TARGET, *NUMERIC_PREDICTORS])

    constant = [c for c in [TARGET, *PREDICTORS] if table[c].nunique(dropna=False) <= 1]
    if constant:
        raise InsufficientData(f"columns have no variance to model: {', '.join(constant)}")

    X = _design_matrix(table)
    y = table[TARGET].astype(float)

    model = RandomForestRegressor(
        n_estimators=n_trees,
        random_state=seed,
        n_jobs=-1,
    )
    model.fit(X, y)

    predictions = _out_of_bag_predictions(model, X.to_numpy(dtype=float))
    fit_score_source = "out_of_bag"
    if predictions is None:
        predictions = model.predict(X)
        fit_score_source = "in_sample"

    feature_names = X.columns.tolist()
    return DowntimeModel(
        model=model,
        feature_names=feature_names,
        variance_explained=float(r2_score(y, predictions)),
        mean_squared_residuals=float(mean_squared_error(y, predictions)),
        fit_score_source=fit_score_source,
        importances=_fold_importances(feature_names, model.feature_importances_),
        n_trees=n_trees,
        seed=seed,
    )


def importance_frame(model: DowntimeModel) -> pd.DataFrame:
    return pd.DataFrame(model.importances, columns=["Feature", "Importance"])
