"""
Data Validators - Transform Layer

Pure functions for validating the games snapshot before it is persisted.
"""

import polars as pl
from typing import Any, Dict
from .schemas import GAMES_SCHEMA
import logging

logger = logging.getLogger(__name__)


def validate_games_schema(df: pl.DataFrame) -> bool:
    """
    Validate games data matches expected schema

    Args:
        df: Games DataFrame

    Returns:
        bool: True if valid, raises exception if invalid
    """
    if df.schema != GAMES_SCHEMA:
        raise ValueError(f"Schema mismatch: expected {GAMES_SCHEMA}, got {df.schema}")

    null_ids = df.select(pl.col("id").is_null().sum()).item()
    if null_ids > 0:
        raise ValueError(f"Null values found in required field 'id': {null_ids}")

    out_of_range = df.filter(
        (pl.col("likeRatio") < 0) | (pl.col("likeRatio") > 100)
    ).height
    if out_of_range > 0:
        raise ValueError(f"Found {out_of_range} games with likeRatio outside [0, 100]")

    logger.info(f"Games schema validation passed: {df.height} records")
    return True


def validate_sorted_by_playing(df: pl.DataFrame) -> bool:
    """Raise if 'playing' is not non-increasing"""
    if df.height > 1:
        increases = df.select((pl.col("playing").diff() > 0).sum()).item()
        if increases > 0:
            raise ValueError(
                f"Games not sorted by playing (descending): {increases} increases found"
            )
    return True


def validate_data_quality(df: pl.DataFrame) -> Dict[str, Any]:
    """
    Collect quality metrics for the snapshot and log anything suspicious

    Args:
        df: Games DataFrame

    Returns:
        Dict: Quality metrics
    """
    quality_metrics = {
        "total_records": df.height,
        "null_counts": {
            column: df.select(pl.col(column).is_null().sum()).item()
            for column in ("name", "icon", "createdTs")
        },
        "duplicate_ids": df.height - df.select(pl.col("id").n_unique()).item(),
    }

    for column, null_count in quality_metrics["null_counts"].items():
        if null_count > 0:
            logger.warning(f"Column '{column}' has {null_count} null values")

    if quality_metrics["duplicate_ids"] > 0:
        logger.warning(
            f"Duplicate universe ids in snapshot: {quality_metrics['duplicate_ids']}"
        )

    return quality_metrics
