"""
Unit tests for post-hoc estimators and cross-athlete group summaries.

- Post-hoc functions run once over the whole table; row count, order and keys must survive.
- Group summaries are computed per date/variable/estimator across athletes.
"""

import numpy as np
import pandas as pd
import pytest

from athlete_monitoring.errors import EstimatorEvaluationError, PosthocShapeError
from athlete_monitoring.estimators import GroupSummaryTransformer, acute_chronic_posthoc
from athlete_monitoring.pipelines import prepare


def mean_only(x):
    return {"mean": float(np.nanmean(x))}


@pytest.fixture
def squad() -> pd.DataFrame:
    """Athletes A, B, C with constant daily Load 1, 2, 3 over days 1-3."""
    rows = [
        {"athlete": athlete, "date": day, "variable": "Load", "value": value}
        for athlete, value in (("A", 1.0), ("B", 2.0), ("C", 3.0))
        for day in (1, 2, 3)
    ]
    return pd.DataFrame(rows)


@pytest.fixture
def load_series() -> pd.DataFrame:
    """Athlete A, Load, 6 days."""
    return pd.DataFrame({
        "athlete": ["A"] * 6,
        "date": list(range(1, 7)),
        "variable": ["Load"] * 6,
        "value": [10.0, 20.0, 30.0, 40.0, 50.0, 60.0],
    })


# ---------------------------------------------------------------------------
# Post-hoc
# ---------------------------------------------------------------------------


def test_acute_chronic_posthoc_columns(load_series: pd.DataFrame) -> None:
    prepared = prepare(load_series, {"acute": 2, "chronic": 4}, posthoc_estimators=acute_chronic_posthoc)
    wide = prepared.data_wide
    assert {"ACD", "ACR", "ES"}.issubset(wide.columns)
    # Day 4: acute mean (30, 40) = 35; chronic mean (10..40) = 25
    row = wide.iloc[3]
    assert row["ACD"] == pytest.approx(10.0)
    assert row["ACR"] == pytest.approx(1.4)
    assert row["ES"] == pytest.approx(10.0 / np.std([10.0, 20.0, 30.0, 40.0], ddof=1))
    assert "ACD" in prepared.estimators


def test_posthoc_nan_during_chronic_warm_up(load_series: pd.DataFrame) -> None:
    prepared = prepare(load_series, {"acute": 2, "chronic": 4}, posthoc_estimators=acute_chronic_posthoc)
    assert prepared.data_wide["ACR"].iloc[:3].isna().all()


def test_posthoc_changing_row_count_raises(load_series: pd.DataFrame) -> None:
    with pytest.raises(PosthocShapeError):
        prepare(load_series, {"acute": 2, "chronic": 4}, posthoc_estimators=lambda df: df.iloc[1:])


def test_posthoc_reordering_rows_raises(load_series: pd.DataFrame) -> None:
    with pytest.raises(PosthocShapeError):
        prepare(load_series, {"acute": 2, "chronic": 4}, posthoc_estimators=lambda df: df.iloc[::-1])


def test_posthoc_changing_keys_raises(load_series: pd.DataFrame) -> None:
    def rename_athlete(df):
        return df.assign(athlete="Z")

    with pytest.raises(PosthocShapeError):
        prepare(load_series, {"acute": 2, "chronic": 4}, posthoc_estimators=rename_athlete)


def test_posthoc_returning_non_frame_raises(load_series: pd.DataFrame) -> None:
    with pytest.raises(PosthocShapeError):
        prepare(load_series, {"acute": 2, "chronic": 4}, posthoc_estimators=lambda df: df.to_dict())


def test_posthoc_exception_is_wrapped(load_series: pd.DataFrame) -> None:
    def needs_missing_column(df):
        return df.assign(ratio=df["acute.median"] / df["chronic.median"])

    with pytest.raises(PosthocShapeError) as exc_info:
        prepare(load_series, {"acute": 2, "chronic": 4}, posthoc_estimators=needs_missing_column)
    assert isinstance(exc_info.value.__cause__, KeyError)


# ---------------------------------------------------------------------------
# Group summaries
# ---------------------------------------------------------------------------


def test_group_summary_median_and_quartiles(squad: pd.DataFrame) -> None:
    """Across A=1, B=2, C=3: median 2, lower (25%) 1.5, upper (75%) 2.5."""
    prepared = prepare(squad, {"acute": 1, "chronic": 1}, rolling_estimators=mean_only)
    gs = prepared.group_summary
    row = gs[(gs["date"] == 2) & (gs["estimator"] == "acute.mean")].iloc[0]
    assert row["group.median"] == 2.0
    assert row["group.lower"] == 1.5
    assert row["group.upper"] == 2.5


def test_group_summary_row_per_date_and_estimator(squad: pd.DataFrame) -> None:
    prepared = prepare(squad, {"acute": 1, "chronic": 1}, rolling_estimators=mean_only)
    gs = prepared.group_summary
    assert len(gs) == 3 * 2
    assert list(gs.columns) == ["date", "variable", "estimator", "group.median", "group.lower", "group.upper"]
    assert set(gs["estimator"]) == {"acute.mean", "chronic.mean"}


def test_group_summary_skips_grid_columns(squad: pd.DataFrame) -> None:
    """Raw value and missing flags are not summarized."""
    prepared = prepare(squad, {"acute": 1, "chronic": 1})
    assert not set(prepared.group_summary["estimator"]) & {"value", "missing_entry", "missing_day"}


def test_group_summary_custom_function(squad: pd.DataFrame) -> None:
    def spread(x):
        return {"min": float(np.nanmin(x)), "max": float(np.nanmax(x))}

    prepared = prepare(squad, {"acute": 1, "chronic": 1}, rolling_estimators=mean_only, group_summary_estimators=spread)
    gs = prepared.group_summary
    assert list(gs.columns[-2:]) == ["group.min", "group.max"]
    assert (gs["group.min"] == 1.0).all() and (gs["group.max"] == 3.0).all()


def test_group_summary_error_has_estimator_context(squad: pd.DataFrame) -> None:
    def fails(x):
        raise RuntimeError("bad summary")

    with pytest.raises(EstimatorEvaluationError) as exc_info:
        prepare(squad, {"acute": 1, "chronic": 1}, rolling_estimators=mean_only, group_summary_estimators=fails)
    assert exc_info.value.estimator == "acute.mean"
    assert exc_info.value.variable == "Load"


def test_group_summary_transformer_explicit_columns(squad: pd.DataFrame) -> None:
    prepared = prepare(squad, {"acute": 1, "chronic": 1}, rolling_estimators=mean_only)
    gs = GroupSummaryTransformer().fit_transform(prepared.data_wide, {"estimator_columns": ["chronic.mean"]})
    assert set(gs["estimator"]) == {"chronic.mean"}
    assert len(gs) == 3


def test_group_summary_keeps_datetime_dates(squad: pd.DataFrame) -> None:
    df = squad.assign(date=pd.Timestamp("2024-05-01") + pd.to_timedelta(squad["date"] - 1, unit="D"))
    prepared = prepare(df, {"acute": 1, "chronic": 1}, rolling_estimators=mean_only)
    assert pd.api.types.is_datetime64_any_dtype(prepared.group_summary["date"])
