# puml_gen/cli.py
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

from .constants import FORMAT_DEFAULT, OUT_DIR_DEFAULT
from .diagrams.registry import DIAGRAMS, render_config_from_model
from .io import load_model
from .puml_fmt import puml_document
from .validate import validate_model
from .writer import write_md, write_puml


def _parse_skinparam(raw: str) -> tuple[str, str]:
    key, sep, value = raw.partition("=")
    if not sep or not key.strip():
        raise argparse.ArgumentTypeError(
            f"expected KEY=VALUE, got {raw!r}"
        )
    return key.strip(), value.strip()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="puml-gen",
        description="Generate PlantUML component diagrams from a YAML structural model.",
    )
    parser.add_argument(
        "--model",
        type=Path,
        required=True,
        help="Path to a model YAML file or a directory of YAML files (merged in name order).",
    )
    parser.add_argument(
        "--out-dir",
        type=Path,
        default=Path(OUT_DIR_DEFAULT),
        help="Output directory for generated diagrams",
    )
    parser.add_argument(
        "--format",
        type=str,
        choices=("puml", "md"),
        default=FORMAT_DEFAULT,
        help="puml=standalone @startuml documents, md=Markdown with a plantuml fence.",
    )
    parser.add_argument(
        "--title",
        type=str,
        default=None,
        help="Diagram title (overrides model.diagram.title)",
    )
    parser.add_argument(
        "--skinparam",
        type=_parse_skinparam,
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="PlantUML skinparam; repeatable, merged over model.diagram.skinparams.",
    )
    parser.add_argument(
        "--roots",
        type=str,
        default="",
        help="Comma-separated root type ids (default: model.roots, else all types).",
    )
    parser.add_argument(
        "--legacy-single-root",
        action="store_true",
        default=None,
        help="Render only the first root (behaviour of the single-root entry point).",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail generation on validation warnings. Errors always fail.",
    )
    parser.add_argument(
        "--stdout",
        action="store_true",
        help="Print the generated document(s) instead of writing files.",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    """CLI entrypoint."""
    args = build_parser().parse_args(argv)

    model = load_model(args.model)

    errors, warnings = validate_model(model)
    for warning in warnings:
        print(f"warning: {warning}", file=sys.stderr)

    if errors or (args.strict and warnings):
        for error in errors:
            print(f"error: {error}", file=sys.stderr)
        raise SystemExit(2)

    root_ids = None
    if args.roots.strip():
        root_ids = tuple(r.strip() for r in args.roots.split(",") if r.strip())

    cfg = render_config_from_model(
        model,
        title=args.title,
        skin_params=dict(args.skinparam) or None,
        root_ids=root_ids,
        legacy_single_root=args.legacy_single_root,
    )

    out_dir: Path = args.out_dir
    for spec in DIAGRAMS:
        try:
            diagram_code = spec.render(model, cfg)
        except KeyError as e:
            print(f"error: {spec.diagram_id}: {e.args[0]}", file=sys.stderr)
            raise SystemExit(2) from e

        title = cfg.title or spec.title

        if args.stdout:
            sys.stdout.write(
                puml_document(diagram_code, title=title, skin_params=cfg.skin_params)
            )
            continue

        if args.format == "md":
            write_md(
                out_dir / f"{spec.filename}.md",
                title,
                diagram_code,
                skin_params=cfg.skin_params,
            )
        else:
            write_puml(
                out_dir / f"{spec.filename}.puml",
                diagram_code,
                title=title,
                skin_params=cfg.skin_params,
            )


if __name__ == "__main__":
    main()
