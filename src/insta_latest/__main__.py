"""Command-line entry: print the latest post of a profile as JSON.

Usage:
    python -m insta_latest [--username NAME] [--headed] [--verbose]
                           [--events-dir DIR]

Reads TARGET_USERNAME / INSTAGRAM_ACCESS_TOKEN and the INSTA_* settings from
the environment (and a local .env file). Exit status is 0 on success, 1 when
every strategy failed.
"""
import argparse
import json
import logging
import time
from dataclasses import replace

from dotenv import load_dotenv

from .config import EngineSettings, TargetConfig
from .engine.diagnostics import DiagnosticsSink
from .engine.orchestrator import PostRetriever
from .telemetry.logger import RetrievalEventLogger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="insta-latest",
        description="Fetch the most recent post of a public Instagram profile.",
    )
    parser.add_argument("--username", help="Profile to read (overrides TARGET_USERNAME)")
    parser.add_argument("--headed", action="store_true", help="Show the browser window")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    parser.add_argument("--events-dir", default="",
                        help="Write per-attempt JSONL events to this directory")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    load_dotenv()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    target = TargetConfig.from_env()
    if args.username:
        target = TargetConfig(identifier=args.username, credential=target.credential)
    settings = EngineSettings.from_env()
    if args.headed:
        settings = replace(settings, headless=False)
    diagnostics = DiagnosticsSink(settings.diagnostics_dir, settings.diagnostics_verbosity)

    event_logger = None
    if args.events_dir:
        event_logger = RetrievalEventLogger(time.strftime("%Y%m%d_%H%M%S"), args.events_dir)
    try:
        retriever = PostRetriever(
            target, settings=settings, diagnostics=diagnostics, event_logger=event_logger,
        )
        outcome = retriever.get_latest_post()
    finally:
        if event_logger is not None:
            event_logger.close()

    print(json.dumps(outcome.to_dict(), ensure_ascii=False, indent=2))
    return 0 if outcome.ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
