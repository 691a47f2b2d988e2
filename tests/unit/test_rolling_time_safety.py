"""
Unit tests for the rolling estimator engine.

- Acute/chronic windows are trailing: a window ending at day i uses days <= i.
- No cross-partition leakage (athletes, variables).
- Warm-up rows (i + 1 < window) equal rolling_fill for every rolling column.
- Estimator failures surface with partition context.
"""

import numpy as np
import pandas as pd
import pytest

from athlete_monitoring.errors import EstimatorEvaluationError
from athlete_monitoring.estimators import RollingEstimatorTransformer, default_rolling_estimators
from athlete_monitoring.pipelines import prepare


def mean_only(x):
    return {"mean": float(np.nanmean(x)) if not np.isnan(x).all() else np.nan}


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def three_days() -> pd.DataFrame:
    """Athlete A, Load, days 1-3 with 10, 20, 30."""
    return pd.DataFrame({
        "athlete": ["A", "A", "A"],
        "date": [1, 2, 3],
        "variable": ["Load", "Load", "Load"],
        "value": [10.0, 20.0, 30.0],
    })


@pytest.fixture
def two_athletes_distinct_values() -> pd.DataFrame:
    """
    Two athletes, 6 days each, distinct value ranges to detect leakage.
    A: 1..6  |  B: 100..600
    """
    days = list(range(1, 7))
    return pd.DataFrame({
        "athlete": ["A"] * 6 + ["B"] * 6,
        "date": days * 2,
        "variable": ["Load"] * 12,
        "value": [float(d) for d in days] + [float(d * 100) for d in days],
    })


@pytest.fixture
def daily_grid() -> pd.DataFrame:
    """Prepared-style daily grid (output of the missing-value policy), rows interleaved."""
    rows = []
    for day in range(1, 6):
        rows.append({"athlete": "A", "date": day, "variable": "Load", "missing_entry": False,
                     "missing_day": False, "value": float(day)})
        rows.append({"athlete": "B", "date": day, "variable": "Load", "missing_entry": False,
                     "missing_day": False, "value": float(day * 10)})
    return pd.DataFrame(rows)


# ---------------------------------------------------------------------------
# Concrete scenarios
# ---------------------------------------------------------------------------


def test_acute_mean_on_three_days(three_days: pd.DataFrame) -> None:
    """acute = 2: day 1 is warm-up (NA), day 2 = 15, day 3 = 25."""
    prepared = prepare(three_days, {"acute": 2, "chronic": 3}, rolling_estimators=mean_only)
    acute = prepared.data_wide["acute.mean"].tolist()
    assert np.isnan(acute[0])
    assert acute[1:] == [15.0, 25.0]
    chronic = prepared.data_wide["chronic.mean"].tolist()
    assert np.isnan(chronic[0]) and np.isnan(chronic[1])
    assert chronic[2] == 20.0


def test_gap_imputed_as_zero_enters_chronic_window(three_days: pd.DataFrame) -> None:
    """Gap on day 2 with na_day = 0: chronic (3) mean on day 3 = (10 + 0 + 30) / 3."""
    df = three_days[three_days["date"] != 2]
    prepared = prepare(df, {"acute": 2, "chronic": 3, "na_day": 0}, rolling_estimators=mean_only)
    wide = prepared.data_wide
    assert wide["date"].tolist() == [1, 2, 3]
    assert wide["missing_day"].tolist() == [False, True, False]
    assert wide["chronic.mean"].iloc[2] == pytest.approx(13.333333, rel=1e-5)


def test_gap_left_na_is_passed_to_estimator(three_days: pd.DataFrame) -> None:
    """The engine does not strip NA; the estimator sees it (conf < 1)."""
    df = three_days[three_days["date"] != 2]
    prepared = prepare(df, {"acute": 2, "chronic": 3})
    wide = prepared.data_wide
    assert wide["chronic.conf"].iloc[2] == pytest.approx(2 / 3)
    assert wide["chronic.mean"].iloc[2] == pytest.approx(20.0)


# ---------------------------------------------------------------------------
# Warm-up fill
# ---------------------------------------------------------------------------


def test_warm_up_rows_equal_rolling_fill(two_athletes_distinct_values: pd.DataFrame) -> None:
    """Rows with i + 1 < window get rolling_fill for every estimator of that window."""
    prepared = prepare(two_athletes_distinct_values, {"acute": 2, "chronic": 4, "rolling_fill": -99.0})
    wide = prepared.data_wide
    for _athlete, group in wide.groupby("athlete"):
        acute_cols = [c for c in wide.columns if c.startswith("acute.")]
        chronic_cols = [c for c in wide.columns if c.startswith("chronic.")]
        assert (group[acute_cols].iloc[:1] == -99.0).all().all()
        assert not (group[acute_cols].iloc[1:] == -99.0).any().any()
        assert (group[chronic_cols].iloc[:3] == -99.0).all().all()
        assert not (group[chronic_cols].iloc[3:] == -99.0).any().any()


def test_window_longer_than_span_is_all_fill(three_days: pd.DataFrame) -> None:
    """No partition reaches a full window: every row is rolling_fill, columns still named."""
    prepared = prepare(three_days, {"acute": 5, "chronic": 10})
    wide = prepared.data_wide
    assert {"acute.mean", "acute.sd", "acute.cv", "acute.conf", "chronic.mean"}.issubset(wide.columns)
    assert wide.filter(like="acute.").isna().all().all()


# ---------------------------------------------------------------------------
# Time safety and partition isolation
# ---------------------------------------------------------------------------


def test_rolling_uses_only_past_and_current_days(daily_grid: pd.DataFrame) -> None:
    """Changing future values leaves every earlier estimate unchanged."""
    cfg = {"acute": 2, "chronic": 3}
    base = RollingEstimatorTransformer(mean_only).fit_transform(daily_grid, cfg)
    changed = daily_grid.copy()
    changed.loc[changed["date"] == 5, "value"] = 1e6
    after = RollingEstimatorTransformer(mean_only).fit_transform(changed, cfg)
    earlier = daily_grid["date"] < 5
    pd.testing.assert_frame_equal(base[earlier], after[earlier])
    assert (after.loc[~earlier, "acute.mean"] > 1e5).all()


def test_rolling_no_cross_athlete_leakage(daily_grid: pd.DataFrame) -> None:
    """A's windows never include B's values (A <= 5, B >= 10)."""
    out = RollingEstimatorTransformer(mean_only).fit_transform(daily_grid, {"acute": 2, "chronic": 3})
    a_rows = daily_grid["athlete"] == "A"
    assert out.loc[a_rows, "chronic.mean"].dropna().max() <= 5.0
    assert out.loc[~a_rows, "chronic.mean"].dropna().min() >= 10.0


def test_rolling_preserves_index_and_order(daily_grid: pd.DataFrame) -> None:
    """Interleaved input rows: output aligned to the input index."""
    out = RollingEstimatorTransformer(mean_only).fit_transform(daily_grid, {"acute": 2, "chronic": 2})
    assert list(out.index) == list(daily_grid.index)
    # Row 2 is A day 2 -> mean(1, 2); row 5 is B day 3 -> mean(20, 30)
    assert out.loc[2, "acute.mean"] == 1.5
    assert out.loc[5, "acute.mean"] == 25.0


def test_rolling_does_not_mutate_input(daily_grid: pd.DataFrame) -> None:
    before = daily_grid.copy()
    RollingEstimatorTransformer().fit_transform(daily_grid, {"acute": 2, "chronic": 3})
    pd.testing.assert_frame_equal(daily_grid, before)


def test_rolling_variables_are_separate_partitions(daily_grid: pd.DataFrame) -> None:
    other = daily_grid.assign(variable="RPE", value=daily_grid["value"] + 1000)
    df = pd.concat([daily_grid, other], ignore_index=True)
    out = RollingEstimatorTransformer(mean_only).fit_transform(df, {"acute": 2, "chronic": 3})
    load = df["variable"] == "Load"
    assert out.loc[load, "chronic.mean"].dropna().max() < 1000


def test_transform_before_fit_raises(daily_grid: pd.DataFrame) -> None:
    with pytest.raises(RuntimeError):
        RollingEstimatorTransformer().transform(daily_grid)


# ---------------------------------------------------------------------------
# Estimator contract
# ---------------------------------------------------------------------------


def test_default_estimators_columns(daily_grid: pd.DataFrame) -> None:
    out = RollingEstimatorTransformer().fit_transform(daily_grid, {"acute": 2, "chronic": 3})
    assert list(out.columns) == [
        "acute.mean", "acute.sd", "acute.cv", "acute.conf",
        "chronic.mean", "chronic.sd", "chronic.cv", "chronic.conf",
    ]


def test_estimator_may_return_series(daily_grid: pd.DataFrame) -> None:
    def as_series(x):
        return pd.Series({"total": float(np.sum(x))})

    out = RollingEstimatorTransformer(as_series).fit_transform(daily_grid, {"acute": 2, "chronic": 3})
    assert "acute.total" in out.columns
    assert out.loc[2, "acute.total"] == 3.0


def test_estimator_error_carries_partition_context(daily_grid: pd.DataFrame) -> None:
    def fails_for_large_values(x):
        if np.nanmax(x) > 30:
            raise ValueError("too large")
        return {"max": float(np.nanmax(x))}

    with pytest.raises(EstimatorEvaluationError) as exc_info:
        RollingEstimatorTransformer(fails_for_large_values).fit_transform(daily_grid, {"acute": 2, "chronic": 3})
    err = exc_info.value
    assert err.athlete == "B"
    assert err.variable == "Load"
    assert err.window == "acute"
    assert err.row_index == 3
    assert isinstance(err.__cause__, ValueError)


def test_estimator_changing_names_raises(daily_grid: pd.DataFrame) -> None:
    calls = {"n": 0}

    def unstable(x):
        calls["n"] += 1
        return {"mean": 1.0} if calls["n"] == 1 else {"other": 1.0}

    with pytest.raises(EstimatorEvaluationError):
        RollingEstimatorTransformer(unstable).fit_transform(daily_grid, {"acute": 2, "chronic": 3})


def test_estimator_returning_scalar_raises(daily_grid: pd.DataFrame) -> None:
    with pytest.raises(EstimatorEvaluationError):
        RollingEstimatorTransformer(lambda x: float(np.mean(x))).fit_transform(daily_grid, {"acute": 2, "chronic": 3})


def test_default_rolling_estimators_all_na_window() -> None:
    """All-NA window gives NaN estimates and conf 0, without raising."""
    out = default_rolling_estimators(np.array([np.nan, np.nan, np.nan]))
    assert np.isnan(out["mean"]) and np.isnan(out["sd"]) and np.isnan(out["cv"])
    assert out["conf"] == 0.0
