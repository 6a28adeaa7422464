from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from site_answers.core.config import AppConfig
from site_answers.core.errors import SiteAnswersError
from site_answers.core.logging_config import configure_logging
from site_answers.core.service import AnswerService
from site_answers.core.store import DocumentStore

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="site-answers", description="Answer questions from a crawled website.")
    p.add_argument("-v", "--verbose", action="store_true", help="log at DEBUG level")
    sub = p.add_subparsers(dest="command", required=True)
    sub.add_parser("ingest", help="crawl the site from the seed list and rebuild the index")
    sub.add_parser("health", help="report whether an index is loaded and its size")
    chat = sub.add_parser("chat", help="answer a question from the current index")
    chat.add_argument("question", nargs="+")
    sub.add_parser("dump", help="print the full current document set")
    return p


def _emit(payload: object) -> None:
    json.dump(payload, sys.stdout, ensure_ascii=False, indent=2)
    sys.stdout.write("\n")


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    config = AppConfig.load()
    configure_logging(config, level=logging.DEBUG if args.verbose else logging.INFO)

    service = AnswerService(config=config, store=DocumentStore(config.paths.snapshot_path))
    if service.load():
        logger.info("Ready with pre-existing index")

    try:
        if args.command == "ingest":
            pages = asyncio.run(service.ingest())
            _emit({"ok": True, "pages": pages})
        elif args.command == "health":
            _emit(service.health().to_dict())
        elif args.command == "chat":
            _emit(service.chat(" ".join(args.question)).to_dict())
        elif args.command == "dump":
            _emit({"docs": service.dump()})
    except SiteAnswersError as e:
        _emit({"ok": False, "error": str(e)})
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
