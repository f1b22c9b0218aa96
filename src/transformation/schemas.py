"""
Transformation Layer Schemas

Schema of the games snapshot, in artifact field order.
"""

import polars as pl

GAMES_SCHEMA = pl.Schema(
    [
        ("id", pl.Int64()),
        ("rootPlaceId", pl.Int64()),
        ("name", pl.String()),
        ("playing", pl.Int64()),
        ("visits", pl.Int64()),
        ("likeRatio", pl.Int64()),
        ("icon", pl.String()),
        ("created", pl.String()),
        ("updated", pl.String()),
        ("createdTs", pl.Int64()),
    ]
)

GAMES_COLUMNS = list(GAMES_SCHEMA.names())
