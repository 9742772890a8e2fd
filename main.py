import sys
import asyncio
import argparse
import json
from pathlib import Path
from typing import Any, List, Optional

# --- Settings/Logging ---
from canews.logging.setup import setup_logging
from canews.config.settings import settings

setup_logging()

from loguru import logger

import uvicorn
from rich import print
from rich.json import JSON
from rich.panel import Panel

from canews.api.app import create_app, to_payload
from canews.models.enums import Domain
from canews.normalization.normalizer import Normalizer
from canews.storage.supabase_client import (
    StoreUnavailableError,
    SupabaseDocumentStore,
    initialize_supabase,
)


async def load_documents(domain: Domain, source: Optional[Path]) -> List[Any]:
    """Loads raw documents from a JSON file, or from the domain's table."""
    if source is not None:
        with open(source, "r", encoding="utf-8") as f:
            documents = json.load(f)
        if isinstance(documents, dict):
            documents = [documents]
        logger.info(f"Loaded {len(documents)} raw documents from {source}")
        return documents

    client = await initialize_supabase()
    store = SupabaseDocumentStore(client)
    return await store.fetch_documents(settings.table_for(domain.value))


async def dump_domain(domain: Domain, source: Optional[Path] = None) -> int:
    """Normalizes one domain and pretty-prints the canonical records."""
    try:
        documents = await load_documents(domain, source)
    except StoreUnavailableError as e:
        logger.critical(f"Cannot read {domain.value} documents: {e}")
        return 1
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Failed to read raw documents from {source}: {e}")
        return 1

    normalizer = Normalizer(
        sports_policy=settings.sports_date_policy,
        window_days=settings.assumed_year_window_days,
    )
    payload = to_payload(normalizer.normalize(domain, documents))
    print(
        Panel(
            JSON.from_data(payload),
            title=f"{domain.value}: {len(payload)} records from {len(documents)} documents",
        )
    )
    return 0


def serve() -> None:
    """Runs the HTTP API with uvicorn."""
    logger.info(f"Starting canews API on {settings.api_host}:{settings.api_port}")
    # log_config=None keeps uvicorn on the intercepted standard logging
    uvicorn.run(
        create_app(), host=settings.api_host, port=settings.api_port, log_config=None
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="canews", description="canews API service")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("serve", help="Run the HTTP API")

    dump = commands.add_parser("dump", help="Normalize one domain and print the result")
    dump.add_argument("domain", choices=[d.value for d in Domain])
    dump.add_argument(
        "--file",
        type=Path,
        default=None,
        help="Read raw documents from a JSON file instead of the store",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.command == "serve":
        serve()
        return 0
    return asyncio.run(dump_domain(Domain(args.domain), args.file))


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        logger.info("Execution interrupted by user (KeyboardInterrupt).")
        sys.exit(0)
    except Exception as e:
        logger.exception(f"Unhandled exception in main execution: {e}")
        sys.exit(1)
