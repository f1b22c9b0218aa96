"""
Roblox API Clients - Pure I/O Operations

One client per endpoint. Each issues a single GET for a batch of universe
ids and maps the response to {universe_id: value}. No merging happens here;
that is the transform layer's job.
"""

import logging
import math
from typing import Any, Dict, Generic, List, Optional, Sequence, TypeVar
from urllib.parse import quote, urlencode

import requests
from pydantic import ValidationError

from src.coreutils.errors import (
    EndpointError,
    ParseError,
    TransportError,
    error_for_status,
)
from src.coreutils.request import ResilientFetcher
from .schemas import GameRecord, VoteCounts

logger = logging.getLogger(__name__)

# API Endpoints
GAMES_ENDPOINT = "https://games.roblox.com/v1/games"
VOTES_ENDPOINT = "https://games.roblox.com/v1/games/votes"
THUMBNAILS_ENDPOINT = "https://thumbnails.roblox.com/v1/games/multiget/thumbnails"

THUMBNAIL_PARAMS = {"size": "768x432", "format": "Png", "isCircular": "false"}

T = TypeVar("T")


def wrap_relay(url: str, relay_url: Optional[str]) -> str:
    """Route a target URL through the relay, which takes it as an encoded query value"""
    if not relay_url:
        return url
    return relay_url + quote(url, safe="")


def like_ratio(up_votes: int, down_votes: int) -> int:
    """Percentage of up votes, rounded half-up; 0 when nobody voted"""
    total = up_votes + down_votes
    if total <= 0:
        return 0
    return math.floor(up_votes / total * 100 + 0.5)


class EndpointClient(Generic[T]):
    """Batch fetch against one endpoint, returning a per-universe mapping"""

    name = "endpoint"
    endpoint = ""
    extra_params: Dict[str, str] = {}

    def __init__(self, fetcher: ResilientFetcher, relay_url: Optional[str] = None):
        self.fetcher = fetcher
        self.relay_url = relay_url

    def build_url(self, ids: Sequence[int]) -> str:
        query = "universeIds=" + ",".join(str(i) for i in ids)
        if self.extra_params:
            query += "&" + urlencode(self.extra_params)
        return wrap_relay(f"{self.endpoint}?{query}", self.relay_url)

    def fetch_batch(self, ids: Sequence[int]) -> Dict[int, T]:
        """
        Fetch one batch of universe ids

        Args:
            ids: Universe ids for this batch

        Returns:
            Dict[int, T]: Mapping for the ids the endpoint returned

        Raises:
            EndpointError: On transport exhaustion, a non-2xx final response
                or an unexpected payload
        """
        url = self.build_url(ids)
        logger.debug(f"Fetching {self.name} for {len(ids)} ids")

        try:
            response = self.fetcher.fetch(url)
        except TransportError as e:
            raise EndpointError(self.name, None, str(e.cause)) from e

        if not 200 <= response.status_code < 300:
            raise error_for_status(self.name, response.status_code, response.reason or "")

        rows = self._rows(response)
        try:
            return self.parse_rows(rows)
        except (ValidationError, TypeError, ValueError) as e:
            raise ParseError(self.name, response.status_code, str(e)) from e

    def _rows(self, response: requests.Response) -> List[Dict[str, Any]]:
        try:
            payload = response.json()
        except ValueError as e:
            raise ParseError(self.name, response.status_code, "invalid JSON") from e

        rows = payload.get("data") if isinstance(payload, dict) else None
        if rows is None:
            return []
        if not isinstance(rows, list):
            raise ParseError(
                self.name, response.status_code, f"'data' is {type(rows).__name__}"
            )
        return [row for row in rows if isinstance(row, dict)]

    def parse_rows(self, rows: List[Dict[str, Any]]) -> Dict[int, T]:
        raise NotImplementedError


class GamesClient(EndpointClient[GameRecord]):
    """Primary records: name, counters, timestamps"""

    name = "games"
    endpoint = GAMES_ENDPOINT

    def parse_rows(self, rows: List[Dict[str, Any]]) -> Dict[int, GameRecord]:
        records = {}
        for row in rows:
            record = GameRecord.model_validate(row)
            records[record.id] = record
        return records


class VotesClient(EndpointClient[int]):
    """Up/down vote counters, reduced to a like ratio"""

    name = "votes"
    endpoint = VOTES_ENDPOINT

    def parse_rows(self, rows: List[Dict[str, Any]]) -> Dict[int, int]:
        ratios = {}
        for row in rows:
            votes = VoteCounts.model_validate(row)
            ratios[votes.id] = like_ratio(votes.upVotes, votes.downVotes)
        return ratios


class ThumbnailsClient(EndpointClient[Optional[str]]):
    """First 768x432 thumbnail per universe"""

    name = "thumbs"
    endpoint = THUMBNAILS_ENDPOINT
    extra_params = THUMBNAIL_PARAMS

    def parse_rows(self, rows: List[Dict[str, Any]]) -> Dict[int, Optional[str]]:
        images = {}
        for row in rows:
            # Older responses only carry targetId
            universe_id = row.get("universeId")
            if universe_id is None:
                universe_id = row.get("targetId")
            if universe_id is None:
                continue

            thumbnails = row.get("thumbnails") or []
            if not isinstance(thumbnails, list):
                raise ValueError(
                    f"thumbnails for universe {universe_id} is {type(thumbnails).__name__}"
                )
            first = thumbnails[0] if thumbnails and isinstance(thumbnails[0], dict) else {}
            images[int(universe_id)] = first.get("imageUrl")
        return images
