#!/usr/bin/env python3
# ruff: noqa: E402
from __future__ import annotations

import argparse
import os
import sys

REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from chessrules.engine.lookup import TABLE_PIECES, format_table, reachability_table
from chessrules.engine.piece import TYPE_NAMES


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Generate empty-board reachability tables for knights, sliders and kings"
    )
    parser.add_argument(
        "--out", type=str, default=None, help="Write the tables to this file (default: stdout)"
    )
    args = parser.parse_args()

    chunks = [
        format_table(TYPE_NAMES[ptype], reachability_table(ptype)) for ptype in TABLE_PIECES
    ]
    text = "\n".join(chunks)
    if args.out:
        with open(args.out, "w", encoding="utf-8") as fh:
            fh.write(text)
        print(f"wrote {len(chunks)} tables to {args.out}")
    else:
        sys.stdout.write(text)


if __name__ == "__main__":
    main()
