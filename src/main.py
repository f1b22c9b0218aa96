"""
Main Entry Point - Roblox Games Snapshot

Fetches games, votes and thumbnails for the tracked universes and writes
public/games.json sorted by current players.
"""

import sys
import os
import logging
from typing import List, Optional

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.coreutils.logging import setup_logging
from src.extract.universe_ids import DEFAULT_UNIVERSE_IDS, load_universe_ids
from src.orchestration.config import PipelineConfig
from src.orchestration.pipeline import GamesPipeline

logger = logging.getLogger(__name__)


def run_pipeline(
    ids: Optional[List[int]] = None, config: Optional[PipelineConfig] = None
) -> dict:
    """
    Run the snapshot pipeline and write the artifact

    Args:
        ids: Universe ids (DEFAULT_UNIVERSE_IDS if not provided)
        config: Run settings (environment-derived if not provided)

    Returns:
        dict: Run statistics
    """
    config = config or PipelineConfig.from_env()
    ids = ids if ids is not None else DEFAULT_UNIVERSE_IDS

    logger.info(f"🚀 Running games snapshot for {len(ids)} universes")
    report = GamesPipeline(config=config).run_and_save(ids)

    return {**report.summary(), "output": config.output_path, "failed_ids": report.failed_ids}


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    import argparse

    parser = argparse.ArgumentParser(description="Roblox Games Snapshot Pipeline")
    parser.add_argument("command", choices=["run"], help="Command to run")
    parser.add_argument(
        "--ids-file",
        help="File with universe ids (JSON array or one id per line)",
    )
    parser.add_argument("--output", help="Snapshot path (default: public/games.json)")
    parser.add_argument("--relay-url", help="Relay prefix for all API requests")
    parser.add_argument("--batch-size", type=int, help="Universe ids per request")
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose logging"
    )

    args = parser.parse_args(argv)

    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    try:
        config = PipelineConfig.from_env(
            output_path=args.output,
            relay_url=args.relay_url,
            batch_size=args.batch_size,
        )
        ids = load_universe_ids(args.ids_file) if args.ids_file else None

        results = run_pipeline(ids, config)
        print(f"✅ Pipeline completed: {results}")
        return 0

    except Exception as e:
        logger.error(f"❌ Pipeline failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
