from __future__ import annotations

import re
from typing import Any, Mapping, Optional

from .constants import FENCE_LANG, INDENT

# PlantUML aliases and qualified port references are built from
# alphanumerics/underscore; `.` is reserved as the part/port separator.
_ILLEGAL_REF_CHARS_RE = re.compile(r"[^A-Za-z0-9_]")


def plantuml_block(code: str) -> str:
    """Wrap PlantUML source in a Markdown PlantUML code fence."""
    return f"```{FENCE_LANG}\n" + code.rstrip() + "\n```\n"


def puml_text(text: object) -> str:
    """Collapse whitespace so a value fits on one PlantUML line."""
    return re.sub(r"\s+", " ", str(text)).strip()


def ref_name(raw: Optional[str]) -> str:
    """Turn an identifier into a token usable in aliases and connector ends.

    Whitespace is dropped; every other character that is not alphanumeric or
    underscore becomes `_`. Never fails: `None` and "" give "".
    """
    if not raw:
        return ""
    compact = re.sub(r"\s+", "", str(raw))
    return _ILLEGAL_REF_CHARS_RE.sub("_", compact)


def display_name(name: str) -> str:
    """Quote a display name when it contains a space."""
    if " " in name:
        return f'"{name}"'
    return name


def alias_prefix(prefix: str) -> str:
    """Map a part prefix (`"sub: "`) to its qualified alias prefix (`"sub."`).

    The part name goes through `ref_name`, so the alias matches the
    `<part>.<port>` reference used by connector lines.
    """
    name = prefix.rstrip()
    if name.endswith(":"):
        name = name[:-1]
    token = ref_name(name)
    return f"{token}." if token else ""


def indent_block(text: str, level: int = 1) -> str:
    """Indent every non-empty line of `text` by `level` nesting levels."""
    pad = INDENT * level
    out: list[str] = []
    for line in text.splitlines(keepends=True):
        if line.strip():
            out.append(pad + line)
        else:
            out.append(line)
    return "".join(out)


def stereo_names(element: Any, is_port: bool) -> str:
    """Default stereotype emitter.

    Ports get nothing here. Other elements get one comment line, indented
    into the block, listing their stereotypes so the annotation survives in
    the text without affecting rendering.
    """
    if is_port:
        return ""
    stereotypes = [s for s in (getattr(element, "stereotypes", None) or ()) if s]
    if not stereotypes:
        return ""
    names = " ".join(f"<<{puml_text(s)}>>" for s in stereotypes)
    return f"{INDENT}' {names}\n"


def _skinparam_value(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return puml_text(value)


def skinparam_lines(skin_params: Optional[Mapping[str, object]]) -> list[str]:
    # Stable order: sorted keys.
    if not skin_params:
        return []
    return [
        f"skinparam {puml_text(key)} {_skinparam_value(skin_params[key])}"
        for key in sorted(skin_params)
    ]


def puml_document(
    body: str,
    *,
    title: Optional[str] = None,
    skin_params: Optional[Mapping[str, object]] = None,
) -> str:
    """Wrap diagram text in `@startuml`/`@enduml` with document-level settings."""
    lines: list[str] = ["@startuml"]
    if title:
        lines.append(f"title {puml_text(title)}")
    lines.extend(skinparam_lines(skin_params))
    text = body.rstrip("\n")
    if text:
        lines.append(text)
    lines.append("@enduml")
    return "\n".join(lines) + "\n"
