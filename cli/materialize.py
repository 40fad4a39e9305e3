"""CLI: Print the canvas rebuilt from the configured rule store as JSON."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys

from rule_canvas.graph.materializer import materialize_from_store
from rule_canvas.repos.rule_store import get_rule_store


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--indent", type=int, default=2, help="JSON indent (0 for compact)")
    args = parser.parse_args()

    graph = asyncio.run(materialize_from_store(get_rule_store()))
    json.dump(
        graph.model_dump(mode="json", by_alias=True),
        sys.stdout,
        indent=args.indent or None,
        ensure_ascii=False,
    )
    sys.stdout.write("\n")
