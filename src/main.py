"""CLI entry point for Sketch to Schema: extraction, SQL output and SVG export."""

from __future__ import annotations
import argparse
import json
import logging
import os
import sys
from pathlib import Path

from config import settings
from domain.models import DBType, Schema
from gui.diagram.scene import build_scene
from gui.diagram.svg_export import write_svg
from gui.services.logging_service import configure_logging
from services import extraction
from services.sample_schema import sample_schema
from services.schema_import import export_raw, import_extraction
from services.sql_generator import generate_sql

logger = logging.getLogger("sketch_schema.cli")


def _extract_schema(image_path: str, api_key: str | None, per_row: int | None = None) -> Schema:
    mime = extraction.is_image_file(image_path)
    if mime is None:
        raise extraction.ExtractionError("Please upload an image file (PNG, JPG).")
    key = api_key or os.environ.get(settings.GEMINI_API_KEY_ENV, "")
    raw = extraction.analyze_sketch(Path(image_path).read_bytes(), key, mime_type=mime)
    result = import_extraction(raw, per_row=per_row)
    if result.dropped:
        logger.warning("%d relationship(s) referenced unknown names and were dropped", len(result.dropped))
    return result.schema


def cmd_gui(args: argparse.Namespace) -> None:  # pragma: no cover - GUI runtime
    from gui.launcher import main as launch

    schema = sample_schema() if args.sample else None
    raise SystemExit(launch(schema=schema, data_dir=args.data_dir))


def cmd_extract(args: argparse.Namespace) -> None:
    schema = _extract_schema(args.image, args.api_key, args.per_row)
    if args.json:
        print(json.dumps(export_raw(schema), indent=2, ensure_ascii=False))
    else:
        print(generate_sql(schema, args.dialect), end="")


def cmd_sample(args: argparse.Namespace) -> None:
    schema = sample_schema()
    if args.json:
        print(json.dumps(export_raw(schema), indent=2, ensure_ascii=False))
    else:
        print(generate_sql(schema, args.dialect), end="")


def cmd_svg(args: argparse.Namespace) -> None:
    schema = _extract_schema(args.image, args.api_key) if args.image else sample_schema()
    path = write_svg(build_scene(schema), args.out)
    print(
        json.dumps(
            {
                "out": str(path),
                "tables": len(schema.tables),
                "relationships": len(schema.relationships),
            },
            indent=2,
        )
    )


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="sketch-schema")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="command", required=True)
    dialects = [d.value for d in DBType]

    gui = sub.add_parser("gui", help="Launch the desktop application")
    gui.add_argument("--sample", action="store_true", help="Start with the sample schema loaded")
    gui.add_argument("--data-dir", required=False, help="Directory for persisted app state")
    gui.set_defaults(func=cmd_gui)

    extract = sub.add_parser("extract", help="Extract a schema from a sketch image and print SQL")
    extract.add_argument("image", help="Path to a PNG/JPG sketch")
    extract.add_argument("--api-key", required=False, help=f"Gemini API key (default: ${settings.GEMINI_API_KEY_ENV})")
    extract.add_argument("--dialect", choices=dialects, default=DBType.POSTGRES.value)
    extract.add_argument("--per-row", type=int, required=False, help="Cards per layout row")
    extract.add_argument("--json", action="store_true", help="Print the name-based schema as JSON instead of SQL")
    extract.set_defaults(func=cmd_extract)

    sample = sub.add_parser("sample", help="Print SQL for the built-in sample schema")
    sample.add_argument("--dialect", choices=dialects, default=DBType.POSTGRES.value)
    sample.add_argument("--json", action="store_true", help="Print the name-based schema as JSON instead of SQL")
    sample.set_defaults(func=cmd_sample)

    svg = sub.add_parser("svg", help="Render the diagram as SVG")
    svg.add_argument("--image", required=False, help="Sketch to extract (default: sample schema)")
    svg.add_argument("--api-key", required=False, help="Gemini API key")
    svg.add_argument("--out", required=True, help="Output SVG path")
    svg.set_defaults(func=cmd_svg)

    return p


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.WARNING)
    try:
        args.func(args)
    except (extraction.ExtractionError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
