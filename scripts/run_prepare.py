"""
Run the prepare pipeline end-to-end: load config, read raw CSV, prepare,
save parquet outputs, log a summary.

Usage (from project root):
    python scripts/run_prepare.py
    python scripts/run_prepare.py --raw-file data/raw/monitoring.csv --env local

Requires: PyYAML, pandas, numpy, pyarrow (for parquet).
"""

import argparse
import logging
import os
import sys
from pathlib import Path

# Project root = parent of scripts/
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import yaml

from athlete_monitoring.estimators import acute_chronic_posthoc, mean_day_aggregate, sum_day_aggregate
from athlete_monitoring.etl.ingest import load_monitoring_csv
from athlete_monitoring.pipelines import prepare

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

DAY_AGGREGATES = {"sum": sum_day_aggregate, "mean": mean_day_aggregate}


def load_config(env: str | None = None) -> dict:
    """Load base config and optionally merge with env-specific config."""
    config_dir = PROJECT_ROOT / "config"
    base_path = config_dir / "base" / "default.yaml"
    if not base_path.exists():
        raise FileNotFoundError(f"Base config not found: {base_path}")

    with open(base_path) as f:
        config = yaml.safe_load(f) or {}

    if env:
        env_path = config_dir / env / "config.yaml"
        if env_path.exists():
            with open(env_path) as f:
                env_config = yaml.safe_load(f) or {}
            for key, val in env_config.items():
                if key in config and isinstance(config[key], dict) and isinstance(val, dict):
                    config[key] = {**config[key], **val}
                else:
                    config[key] = val
    return config


def main() -> None:
    parser = argparse.ArgumentParser(description="Prepare athlete monitoring data and save results.")
    parser.add_argument(
        "--raw-file",
        type=Path,
        default=None,
        help="Path to raw CSV (default: data/raw/monitoring.csv from config).",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Directory for parquet outputs (default: data/processed from config).",
    )
    parser.add_argument(
        "--env",
        type=str,
        default=None,
        help="Config env to merge (e.g. local, staging). Uses APP_ENV if not set.",
    )
    parser.add_argument(
        "--day-aggregate",
        choices=sorted(DAY_AGGREGATES),
        default=None,
        help="How to combine same-day entries (default: prepare.day_aggregate from config, else sum).",
    )
    parser.add_argument(
        "--acute-chronic",
        action="store_true",
        help="Add ACD/ACR/ES post-hoc columns (needs mean and sd rolling estimators).",
    )
    args = parser.parse_args()

    env = args.env or os.environ.get("APP_ENV")
    config = load_config(env)

    data_cfg = config.get("data") or {}
    raw_file = args.raw_file or Path(data_cfg.get("raw_file", "data/raw/monitoring.csv"))
    if not raw_file.is_absolute():
        raw_file = PROJECT_ROOT / raw_file
    output_dir = args.output_dir or Path(data_cfg.get("processed_path", "data/processed"))
    if not output_dir.is_absolute():
        output_dir = PROJECT_ROOT / output_dir

    prepare_cfg = config.get("prepare") or {}
    ingest_cfg = {"date_column": prepare_cfg.get("date_column", "date"), **(config.get("ingest") or {})}
    aggregate_name = args.day_aggregate or prepare_cfg.get("day_aggregate", "sum")
    if aggregate_name not in DAY_AGGREGATES:
        raise ValueError(f"Unknown day_aggregate '{aggregate_name}'. Expected one of {sorted(DAY_AGGREGATES)}.")

    logger.info("Starting prepare: raw=%s, output=%s, day_aggregate=%s", raw_file, output_dir, aggregate_name)
    df = load_monitoring_csv(raw_file, config=ingest_cfg)
    prepared = prepare(
        df,
        config=prepare_cfg,
        day_aggregate=DAY_AGGREGATES[aggregate_name],
        posthoc_estimators=acute_chronic_posthoc if args.acute_chronic else None,
    )

    output_dir.mkdir(parents=True, exist_ok=True)
    prepared.data_wide.to_parquet(output_dir / "monitoring_wide.parquet", index=False)
    prepared.group_summary.to_parquet(output_dir / "monitoring_group_summary.parquet", index=False)
    summary = prepared.summary()
    summary.to_parquet(output_dir / "monitoring_summary.parquet", index=False)
    logger.info("Saved prepared data to %s", output_dir)

    dates = prepared.data_wide["date"]
    logger.info(
        "Summary: type=%s, athletes=%d, variables=%d, rows=%d, date_min=%s, date_max=%s",
        prepared.type,
        len(prepared.athletes),
        len(prepared.variables),
        len(prepared.data_wide),
        dates.min(),
        dates.max(),
    )


if __name__ == "__main__":
    main()
