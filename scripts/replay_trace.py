#!/usr/bin/env python3
"""Replay a recorded get/put trace against an LRU cache and print the outputs."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from recency_cache import (  # noqa: E402
    InvalidCapacityError,
    TraceError,
    load_settings,
    replay_operations,
)

logger = logging.getLogger("recency_cache.replay_trace")

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _load_trace(path: Path) -> tuple[list[str], list[list[Any]]]:
    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise TraceError(f"cannot read trace: {path}") from exc
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise TraceError(f"invalid trace json: {path}") from exc
    if not isinstance(payload, dict):
        raise TraceError("trace root must be object")

    operations = payload.get("operations")
    arguments = payload.get("arguments")
    if not isinstance(operations, list) or not isinstance(arguments, list):
        raise TraceError("trace must contain 'operations' and 'arguments' lists")
    if not all(isinstance(args, list) for args in arguments):
        raise TraceError("every entry in 'arguments' must be a list")
    return operations, arguments


def main(argv: list[str] | None = None) -> int:
    settings = load_settings()
    parser = argparse.ArgumentParser(
        description="Replay an LRUCache operation trace"
    )
    parser.add_argument(
        "--trace",
        type=Path,
        required=True,
        help='JSON file with "operations" and "arguments" lists',
    )
    parser.add_argument("--output", type=Path, default=None)
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=_LOG_LEVELS,
        default=settings["LOG_LEVEL"],
    )
    args = parser.parse_args(argv)
    if args.log_level not in _LOG_LEVELS:
        expected = ", ".join(_LOG_LEVELS)
        parser.error(
            f"invalid RECENCY_CACHE_LOG_LEVEL {args.log_level!r}, "
            f"expected one of {expected}"
        )

    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        operations, arguments = _load_trace(args.trace)
        outputs, cache = replay_operations(operations, arguments)
    except (TraceError, InvalidCapacityError) as exc:
        logger.error("Trace rejected: %s", exc)
        return 2

    payload: dict[str, Any] = {
        "trace": str(args.trace),
        "outputs": outputs,
        "stats": cache.stats().to_dict(),
    }
    print(json.dumps(payload, ensure_ascii=False))
    if args.output is not None:
        args.output.write_text(
            json.dumps(payload, ensure_ascii=False, indent=2),
            encoding="utf-8",
        )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
