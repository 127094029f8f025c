from __future__ import annotations

import argparse
import json
import logging
import os
from typing import Sequence

from .usecase import PRECISIONS, build_view, build_views, view_rows, view_to_payload

LOG_LEVEL_ENV = "IEEEVIEW_LOG_LEVEL"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ieeeview",
        description="Inspect the IEEE-754 bit layout of a float literal.",
    )
    parser.add_argument(
        "--dump",
        metavar="TEXT",
        help="print the fields for TEXT and exit instead of opening the viewer",
    )
    parser.add_argument(
        "--precision",
        choices=(*PRECISIONS, "both"),
        default="both",
        help="encoding width used with --dump (default: both)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="with --dump, print the UI payload as JSON",
    )
    parser.add_argument(
        "--log-level",
        default=os.environ.get(LOG_LEVEL_ENV, "WARNING"),
        help=f"logging level (default: ${LOG_LEVEL_ENV} or WARNING)",
    )
    return parser


def format_rows(rows: list[tuple[str, str]]) -> str:
    width = max(len(label) for label, _value in rows)
    return "\n".join(f"{label:<{width}}  {value}" for label, value in rows)


def dump(text: str, precision: str, as_json: bool = False) -> str:
    if precision == "both":
        views = build_views(text)
    else:
        views = {precision: build_view(text, precision)}

    if as_json:
        return json.dumps(
            {name: view_to_payload(view) for name, view in views.items()},
            indent=2,
        )

    sections = []
    for name, view in views.items():
        sections.append(f"[{name}]\n{format_rows(view_rows(view))}")
    return "\n\n".join(sections)


def _configure_logging(level_name: str) -> None:
    level = logging.getLevelName(level_name.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {level_name!r}")
    logging.basicConfig(
        level=level,
        format="[ieeeview] %(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        _configure_logging(args.log_level)
    except ValueError as exc:
        parser.error(str(exc))

    if args.dump is not None:
        print(dump(args.dump, args.precision, as_json=args.json))
        return 0

    from .visualizer import ViewerApp

    app = ViewerApp()
    app.mainloop()
    return 0
