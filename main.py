import sys
import asyncio
import argparse
from typing import List, Optional

# --- Settings/Logging ---
from roster_match.logging.setup import setup_logging
from roster_match.config.settings import MAX_BATCH_SIZE, MIN_BATCH_SIZE, load_settings

settings = load_settings()
setup_logging(settings.log_level, settings.secrets)

from loguru import logger

# --- End Settings/Logging ---

from roster_match.matching.client import ChatCompletionMatcher
from roster_match.pipeline.identifier import identify_players
from roster_match.storage.supabase_client import initialize_supabase

from rich import print
from rich.panel import Panel


def batch_size(value: str) -> int:
    """argparse type enforcing the same bounds as the batch_size setting."""
    try:
        size = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}")
    if not MIN_BATCH_SIZE <= size <= MAX_BATCH_SIZE:
        raise argparse.ArgumentTypeError(
            f"must be between {MIN_BATCH_SIZE} and {MAX_BATCH_SIZE}, got {size}"
        )
    return size


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Identify player mentions in the content catalog."
    )
    parser.add_argument(
        "--batch-size",
        type=batch_size,
        default=settings.batch_size,
        help="Maximum number of mentions to process (default: %(default)s).",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Match players but do not write results back to the catalog.",
    )
    return parser.parse_args(argv)


async def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the application."""
    args = parse_args(argv)
    logger.info("Starting player identification run")

    supabase_client = await initialize_supabase(
        str(settings.supabase_url), settings.supabase_key
    )
    matcher = ChatCompletionMatcher(
        str(settings.llm_api_url),
        settings.llm_api_key,
        timeout=settings.request_timeout_seconds,
    )
    try:
        summary = await identify_players(
            settings,
            supabase_client,
            matcher,
            batch_size=args.batch_size,
            dry_run=args.dry_run,
        )
    finally:
        await matcher.close()

    print(Panel("\n".join(summary.lines()), title="Player identification"))


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Execution interrupted by user (KeyboardInterrupt).")
        sys.exit(0)
    except Exception as e:
        logger.exception(f"Unhandled exception in main execution: {e}")
        sys.exit(1)
