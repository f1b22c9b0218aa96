"""
Data Transformers - Transform Layer

Pure functions joining the three endpoint mappings of a batch.
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence

import polars as pl

from src.coreutils.time import iso_to_epoch_ms
from src.extract.schemas import GameRecord
from .schemas import GAMES_SCHEMA


def build_entry(
    record: GameRecord, like_ratio: int = 0, icon: Optional[str] = None
) -> Dict[str, Any]:
    """Build one games entry from a primary record and its enrichments"""
    return {
        "id": record.id,
        "rootPlaceId": record.rootPlaceId,
        "name": record.name,
        "playing": record.playing,
        "visits": record.visits,
        "likeRatio": like_ratio,
        "icon": icon,
        "created": record.created,
        "updated": record.updated,
        "createdTs": iso_to_epoch_ms(record.created),
    }


def merge_batch(
    ids: Sequence[int],
    games: Mapping[int, GameRecord],
    votes: Mapping[int, int],
    thumbnails: Mapping[int, Optional[str]],
) -> List[Dict[str, Any]]:
    """
    Join one batch of endpoint mappings into games entries

    The games endpoint is the source of truth: an id without a primary record
    produces no entry, whatever the other two endpoints returned.

    Args:
        ids: Batch ids in input order (duplicates produce duplicate entries)
        games: Primary records by universe id
        votes: Like ratio by universe id (missing → 0)
        thumbnails: Icon URL by universe id (missing → None)

    Returns:
        List[Dict]: Entries in batch order
    """
    entries = []
    for universe_id in ids:
        record = games.get(universe_id)
        if record is None:
            continue
        entries.append(
            build_entry(
                record,
                like_ratio=votes.get(universe_id, 0),
                icon=thumbnails.get(universe_id),
            )
        )
    return entries


def entries_to_frame(entries: Sequence[Dict[str, Any]]) -> pl.DataFrame:
    """Convert entries to a DataFrame with GAMES_SCHEMA (empty input → empty frame)"""
    return pl.DataFrame(list(entries), schema=GAMES_SCHEMA)


def sort_by_playing(df: pl.DataFrame) -> pl.DataFrame:
    """
    Sort games by concurrent players, most first

    Ties keep their incoming order.
    """
    return df.sort("playing", descending=True, maintain_order=True)
