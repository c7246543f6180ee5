"""
dashgrid: entry point.

Usage:
    python -m dashgrid serve                    # start web server on :8000
    python -m dashgrid serve --port 3000
    python -m dashgrid validate layout.json     # exit 1 on violations
    python -m dashgrid migrate rows.json --out layout.json
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from dashgrid.layout import (
    LayoutFormatError, parse_layout, validate_layout, layout_to_dict,
    is_legacy_format, migrate_legacy_rows,
)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="dashgrid", description="Dashboard grid layout engine")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="cmd", required=True)

    sv = sub.add_parser("serve", help="Start the web server")
    sv.add_argument("--host", default="127.0.0.1", help="Host to bind")
    sv.add_argument("--port", type=int, default=8000, help="Port to bind")

    va = sub.add_parser("validate", help="Check a layout.json against the grid invariants")
    va.add_argument("path", help="Path to layout.json (current or legacy format)")

    mg = sub.add_parser("migrate", help="Convert a legacy row layout to the item format")
    mg.add_argument("path", help="Path to the legacy rows JSON")
    mg.add_argument("--out", default=None, help="Output file (default: stdout)")

    return p


def _load_items(path: Path):
    data = json.loads(path.read_text(encoding="utf-8"))
    if is_legacy_format(data):
        return migrate_legacy_rows(data)
    return parse_layout(data)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.cmd == "serve":
        from dashgrid.web.server import main as serve
        serve(host=args.host, port=args.port)
        return 0

    try:
        if args.cmd == "validate":
            items = _load_items(Path(args.path))
            violations = validate_layout(items)
            for v in violations:
                print(f"{v.kind}: {v.message}")
            if violations:
                return 1
            print(f"OK: {len(items)} item(s), no violations")
            return 0

        if args.cmd == "migrate":
            data = json.loads(Path(args.path).read_text(encoding="utf-8"))
            if not is_legacy_format(data):
                print("Error: expected a list of {\"items\": [...]} rows", file=sys.stderr)
                return 2
            text = json.dumps(layout_to_dict(migrate_legacy_rows(data)), indent=2)
            if args.out:
                Path(args.out).write_text(text, encoding="utf-8")
            else:
                print(text)
            return 0
    except (OSError, json.JSONDecodeError, LayoutFormatError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    return 2


if __name__ == "__main__":
    sys.exit(main())
