from __future__ import annotations

from pathlib import Path
from typing import Mapping, Optional

from .puml_fmt import plantuml_block, puml_document


def write_puml(
    path: Path,
    diagram_code: str,
    *,
    title: Optional[str] = None,
    skin_params: Optional[Mapping[str, object]] = None,
) -> None:
    """Write a standalone `.puml` document (`@startuml` ... `@enduml`)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    content = puml_document(diagram_code, title=title, skin_params=skin_params)
    path.write_text(content, encoding="utf-8")


def write_md(
    path: Path,
    title: str,
    diagram_code: str,
    *,
    skin_params: Optional[Mapping[str, object]] = None,
) -> None:
    """Write a titled Markdown file containing a PlantUML diagram block.

    The block holds a complete `@startuml` document so Markdown renderers that
    hand fenced PlantUML to a server get valid input.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    content = f"# {title}\n\n{plantuml_block(puml_document(diagram_code, skin_params=skin_params))}"
    path.write_text(content, encoding="utf-8")
