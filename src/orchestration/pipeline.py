"""
Pipeline Orchestrator - Batched Fan-out/Join

Workflow:
1. Split the universe ids into batches of config.batch_size
2. Per batch, call the games, votes and thumbnails endpoints concurrently
   and wait for all three (join barrier)
3. Merge the three mappings; if any endpoint failed, discard the whole batch
   and log its ids for manual reprocessing
4. Pause config.throttle_delay between batches
5. Sort everything once by players and write the snapshot

Batches never overlap. No failure of a single batch stops the run.
"""

import time
import logging
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from enum import Enum
from functools import partial, reduce
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import polars as pl

# Extract layer imports
from src.coreutils.backoff import compute_wait_ms
from src.coreutils.errors import EndpointError
from src.coreutils.request import ResilientFetcher
from src.extract.roblox_api import GamesClient, ThumbnailsClient, VotesClient
from src.extract.universe_ids import DEFAULT_UNIVERSE_IDS

# Transform layer imports
from src.transformation.transformers import (
    entries_to_frame,
    merge_batch,
    sort_by_playing,
)
from src.transformation.validators import (
    validate_data_quality,
    validate_games_schema,
    validate_sorted_by_playing,
)

# Load layer imports
from src.load.local_storage import save_games_json

from .config import PipelineConfig

logger = logging.getLogger(__name__)


class BatchState(Enum):
    PENDING = "pending"
    FETCHING = "fetching"
    MERGED = "merged"
    FAILED = "failed"


@dataclass
class BatchResult:
    """Outcome of one batch"""

    index: int
    ids: List[int]
    state: BatchState = BatchState.PENDING
    entries: List[Dict[str, Any]] = field(default_factory=list)
    error: Optional[EndpointError] = None


@dataclass(frozen=True)
class ResultAggregator:
    """Entries of successful batches, in batch order then within-batch order"""

    previous: Optional["ResultAggregator"] = None
    batch: Tuple[Dict[str, Any], ...] = ()

    def extend(self, entries: Sequence[Dict[str, Any]]) -> "ResultAggregator":
        # Links to the previous state instead of copying it
        return ResultAggregator(previous=self, batch=tuple(entries))

    @property
    def entries(self) -> Tuple[Dict[str, Any], ...]:
        batches = []
        node: Optional[ResultAggregator] = self
        while node is not None:
            batches.append(node.batch)
            node = node.previous
        return tuple(entry for batch in reversed(batches) for entry in batch)

    def finalize(self) -> pl.DataFrame:
        """Final collection: sorted by playing descending, stable on ties"""
        return sort_by_playing(entries_to_frame(self.entries))


@dataclass
class RunReport:
    games: pl.DataFrame
    batches: List[BatchResult]

    @property
    def failed_batches(self) -> List[BatchResult]:
        return [b for b in self.batches if b.state is BatchState.FAILED]

    @property
    def failed_ids(self) -> List[int]:
        return [i for b in self.failed_batches for i in b.ids]

    def summary(self) -> Dict[str, int]:
        return {
            "batches": len(self.batches),
            "failed_batches": len(self.failed_batches),
            "games": self.games.height,
        }


def chunk_ids(ids: Sequence[int], size: int) -> List[List[int]]:
    """
    Split ids into consecutive batches of at most `size`

    Args:
        ids: Universe ids in input order
        size: Maximum batch size

    Returns:
        List[List[int]]: Batches in order (empty input → no batches)
    """
    if size < 1:
        raise ValueError(f"Batch size must be >= 1, got {size}")
    return [list(ids[i : i + size]) for i in range(0, len(ids), size)]


class GamesPipeline:
    """Orchestrates the games snapshot, one batch at a time"""

    def __init__(
        self,
        config: Optional[PipelineConfig] = None,
        games_client: Optional[GamesClient] = None,
        votes_client: Optional[VotesClient] = None,
        thumbnails_client: Optional[ThumbnailsClient] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        """
        Initialize the pipeline

        Args:
            config: Run settings (defaults if not provided)
            games_client: Primary records client (built from config if not provided)
            votes_client: Votes client (built from config if not provided)
            thumbnails_client: Thumbnails client (built from config if not provided)
            sleep: Sleep function taking seconds, used for throttling and retries
        """
        self.config = config or PipelineConfig()
        self._sleep = sleep or time.sleep

        self.games_client = games_client or GamesClient(
            self._new_fetcher(), self.config.relay_url
        )
        self.votes_client = votes_client or VotesClient(
            self._new_fetcher(), self.config.relay_url
        )
        self.thumbnails_client = thumbnails_client or ThumbnailsClient(
            self._new_fetcher(), self.config.relay_url
        )

    def _new_fetcher(self) -> ResilientFetcher:
        # One fetcher (and session) per client: the three run on separate threads
        return ResilientFetcher(
            timeout=self.config.request_timeout,
            max_attempts=self.config.max_attempts,
            backoff=partial(
                compute_wait_ms,
                base_ms=self.config.backoff_base_ms,
                cap_ms=self.config.backoff_cap_ms,
            ),
            sleep=self._sleep,
        )

    def fetch_batch(self, ids: Sequence[int]) -> Tuple[Dict, Dict, Dict]:
        """
        Call the three endpoints concurrently and wait for all of them

        Returns:
            Tuple: (games, votes, thumbnails) mappings

        Raises:
            EndpointError: The first failure in endpoint order, once all settled
        """
        clients = (self.games_client, self.votes_client, self.thumbnails_client)
        with ThreadPoolExecutor(
            max_workers=len(clients), thread_name_prefix="endpoint"
        ) as executor:
            futures = [executor.submit(client.fetch_batch, ids) for client in clients]
            wait(futures)

        games, votes, thumbnails = (future.result() for future in futures)
        return games, votes, thumbnails

    def process_batch(self, index: int, ids: Sequence[int]) -> BatchResult:
        """
        Fetch and merge one batch; all-or-nothing

        Args:
            index: 1-based batch number (for logging)
            ids: Universe ids of the batch

        Returns:
            BatchResult: MERGED with entries, or FAILED with the error
        """
        result = BatchResult(index=index, ids=list(ids))
        result.state = BatchState.FETCHING
        logger.info(f"🔄 Batch {index}: fetching {len(ids)} universes")

        try:
            games, votes, thumbnails = self.fetch_batch(ids)
        except EndpointError as e:
            result.state = BatchState.FAILED
            result.error = e
            logger.error(
                f"❌ Batch {index} failed for ids [{','.join(str(i) for i in ids)}]: {e}"
            )
            return result

        result.entries = merge_batch(ids, games, votes, thumbnails)
        result.state = BatchState.MERGED

        dropped = len(ids) - len(result.entries)
        logger.info(
            f"✅ Batch {index}: merged {len(result.entries)} games"
            + (f" ({dropped} ids without a game record)" if dropped else "")
        )
        return result

    def _step(
        self,
        acc: Tuple[ResultAggregator, Tuple[BatchResult, ...]],
        batch: Tuple[int, List[int]],
    ) -> Tuple[ResultAggregator, Tuple[BatchResult, ...]]:
        aggregator, results = acc
        index, ids = batch

        if index > 1 and self.config.throttle_delay > 0:
            self._sleep(self.config.throttle_delay)

        result = self.process_batch(index, ids)
        if result.state is BatchState.MERGED:
            aggregator = aggregator.extend(result.entries)
        return aggregator, results + (result,)

    def run(self, ids: Sequence[int]) -> RunReport:
        """
        Process every batch in order and build the sorted collection

        Args:
            ids: Universe ids in input order

        Returns:
            RunReport: Sorted games and per-batch outcomes
        """
        batches = chunk_ids(ids, self.config.batch_size)
        logger.info(
            f"🚀 Starting games pipeline: {len(ids)} universes in {len(batches)} batches"
        )

        aggregator, results = reduce(
            self._step, enumerate(batches, 1), (ResultAggregator(), ())
        )
        report = RunReport(games=aggregator.finalize(), batches=list(results))

        if report.failed_batches:
            logger.warning(
                f"⚠️ {len(report.failed_batches)} batch(es) failed; "
                f"ids to reprocess: [{','.join(str(i) for i in report.failed_ids)}]"
            )
        return report

    def run_and_save(self, ids: Sequence[int]) -> RunReport:
        """Run the pipeline, validate the collection and write the artifact"""
        report = self.run(ids)

        validate_games_schema(report.games)
        validate_sorted_by_playing(report.games)
        validate_data_quality(report.games)

        save_games_json(report.games, self.config.output_path)
        logger.info(f"✅ Pipeline completed: {report.summary()}")
        return report


# Convenience function for direct use
def run_games_pipeline(
    ids: Optional[Sequence[int]] = None, config: Optional[PipelineConfig] = None
) -> RunReport:
    """Run the full pipeline over `ids` (DEFAULT_UNIVERSE_IDS if not provided)"""
    pipeline = GamesPipeline(config=config)
    return pipeline.run_and_save(list(ids) if ids is not None else DEFAULT_UNIVERSE_IDS)
