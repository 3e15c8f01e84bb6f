"""Entry point for the journal parser.

Usage::

    python -m umbrella_journal journal-1.eml [journal-2.eml ...]

Prints one JSON document per parsed envelope to stdout; logs go to stderr.
"""

from __future__ import annotations

import sys

import structlog

from .config import ParserConfig
from .envelope import EnvelopeParser
from .exceptions import EnvelopeParseError
from .logging import setup_logging_from_config

logger = structlog.get_logger()


def main(argv: list[str] | None = None) -> None:
    paths = sys.argv[1:] if argv is None else argv
    if not paths:
        print("Usage: python -m umbrella_journal <file.eml> [...]", file=sys.stderr)
        sys.exit(1)

    config = ParserConfig()
    setup_logging_from_config(config)
    parser = EnvelopeParser(config)

    failed = 0
    for path in paths:
        try:
            with open(path, "rb") as fh:
                message = parser.parse(fh)
        except OSError as exc:
            logger.error("journal_unreadable", path=path, error=str(exc))
            failed += 1
            continue
        except EnvelopeParseError as exc:
            logger.error("journal_parse_failed", path=path, stage=exc.stage.value, reason=exc.reason)
            failed += 1
            continue
        print(message.model_dump_json())

    if failed:
        sys.exit(1)


if __name__ == "__main__":
    main()
