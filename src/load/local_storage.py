"""
Local Storage - Load Layer

Pure functions for writing and reading the games snapshot artifact.
"""

import polars as pl
import json
import os
import logging

from src.transformation.schemas import GAMES_SCHEMA

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_PATH = "public/games.json"


def save_games_json(df: pl.DataFrame, filepath: str = DEFAULT_OUTPUT_PATH) -> str:
    """
    Save games DataFrame as {"games": [...]}

    Args:
        df: Games DataFrame (written in row order)
        filepath: Path to save file

    Returns:
        str: Path to saved file
    """
    logger.info(f"Saving games snapshot to JSON: {filepath}")

    # Ensure directory exists
    directory = os.path.dirname(filepath)
    if directory:
        os.makedirs(directory, exist_ok=True)

    data = {"games": df.to_dicts()}

    with open(filepath, "w") as f:
        json.dump(data, f, indent=2)

    logger.info(f"Saved {df.height} games to {filepath}")
    return filepath


def load_games_json(filepath: str = DEFAULT_OUTPUT_PATH) -> pl.DataFrame:
    """
    Load a games snapshot written by save_games_json

    Args:
        filepath: Path to JSON file

    Returns:
        pl.DataFrame: Games in file order, with GAMES_SCHEMA
    """
    logger.info(f"Loading games snapshot from JSON: {filepath}")

    if not os.path.exists(filepath):
        raise FileNotFoundError(f"JSON file not found: {filepath}")

    with open(filepath, "r") as f:
        data = json.load(f)

    if not isinstance(data, dict) or not isinstance(data.get("games"), list):
        raise ValueError(f"{filepath} does not contain a 'games' array")

    df = pl.DataFrame(data["games"], schema=GAMES_SCHEMA)

    logger.info(f"Loaded {df.height} games from {filepath}")
    return df
