# puml_gen/io.py
from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import yaml

from .constants import MODEL_SECTIONS

# Sections whose entries from several files are appended in file order.
LIST_SECTIONS = ("types", "roots")


def _read_model_file(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ValueError(f"Failed to parse YAML {path}: {e}") from e

    if data is None:
        return {}

    if not isinstance(data, dict):
        raise TypeError(
            f"Top-level YAML must be a mapping in {path}, got {type(data).__name__}"
        )

    unknown = sorted(str(k) for k in data if k not in MODEL_SECTIONS)
    if unknown:
        print(
            f"warning: {path}: ignoring unknown top-level key(s): {', '.join(unknown)}",
            file=sys.stderr,
        )

    return data


def _merge_settings(
    dst: dict[str, Any], src: dict[str, Any], *, src_path: Path, where: str
) -> None:
    """Merge one `diagram:` mapping into another; equal values may repeat."""
    for key, value in src.items():
        if key not in dst:
            dst[key] = value
            continue
        existing = dst[key]
        if isinstance(existing, dict) and isinstance(value, dict):
            _merge_settings(existing, value, src_path=src_path, where=f"{where}.{key}")
            continue
        if existing != value:
            raise ValueError(
                f"Model merge conflict on key {key!r} ({where}) from {src_path}: "
                f"{existing!r} != {value!r}"
            )


def merge_model_part(
    model: dict[str, Any], part: dict[str, Any], *, src_path: Path
) -> None:
    """Fold one file of a split model into `model`.

    `types` and `roots` are appended in file order. `diagram` settings are
    merged key by key. A section whose shape differs between files is an
    error; unknown top-level keys are kept once (first file wins).
    """
    for key, value in part.items():
        if key not in model:
            model[key] = value
            continue

        existing = model[key]
        if key in LIST_SECTIONS:
            if not isinstance(existing, list) or not isinstance(value, list):
                raise ValueError(
                    f"Model merge conflict on key {key!r} from {src_path}: "
                    f"expected lists, got {type(existing).__name__} and {type(value).__name__}"
                )
            model[key] = existing + value
        elif key == "diagram":
            if not isinstance(existing, dict) or not isinstance(value, dict):
                raise ValueError(
                    f"Model merge conflict on key 'diagram' from {src_path}: "
                    "expected mappings"
                )
            _merge_settings(existing, value, src_path=src_path, where="diagram")


def model_files(model_dir: Path) -> list[Path]:
    """YAML files of a split model, in deterministic (sorted name) order."""
    return sorted(
        p for p in model_dir.iterdir()
        if p.is_file() and p.suffix in (".yaml", ".yml")
    )


def load_model(path: Path) -> dict[str, Any]:
    """Load the YAML structural model (split directory or single file)."""
    if not path.exists():
        raise FileNotFoundError(str(path))

    if path.is_dir():
        merged: dict[str, Any] = {}
        for part_path in model_files(path):
            merge_model_part(merged, _read_model_file(part_path), src_path=part_path)
        return merged

    return _read_model_file(path)
