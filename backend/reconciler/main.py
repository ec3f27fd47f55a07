"""
Command-line entrypoint.
Reads fixtures and predictions from JSON files, runs one reconciliation and
prints the camelCase result on stdout; logs go to stderr.

Usage:
  python -m reconciler.main FIXTURES.json PREDICTIONS.json [--options OPTIONS.json]
"""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Optional, Sequence

# Ensure backend root is on path when run as python -m reconciler.main
_backend = Path(__file__).resolve().parent.parent
if str(_backend) not in sys.path:
    sys.path.insert(0, str(_backend))

from shared.utils.logging import get_logger, setup_logging
from shared.utils.metrics import start_metrics_server

from reconciler.service import FixtureReconciler

logger = get_logger(__name__)


def _load_json(path: Optional[str]) -> Any:
    if path is None:
        return None
    with open(path, encoding="utf-8") as fh:
        return json.load(fh)


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="reconciler", description="Merge fixtures with a user's predictions.")
    parser.add_argument("fixtures", help="JSON file holding a list of fixture records")
    parser.add_argument("predictions", help="JSON file holding a list of prediction records")
    parser.add_argument("--options", help="JSON file with merge options (camelCase or snake_case keys)")
    parser.add_argument("--indent", type=int, default=2)
    parser.add_argument("--metrics", action="store_true", help="Expose Prometheus metrics while running")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parser().parse_args(argv)
    setup_logging("reconciler", stream=sys.stderr)
    if args.metrics:
        start_metrics_server()

    try:
        fixtures = _load_json(args.fixtures)
        predictions = _load_json(args.predictions)
        options = _load_json(args.options)
    except (OSError, ValueError) as e:
        logger.error("input_load_failed", error=str(e))
        return 2

    result = FixtureReconciler().process(fixtures, predictions, options)
    print(result.model_dump_json(by_alias=True, indent=args.indent))
    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
