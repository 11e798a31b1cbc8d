# puml_gen/constants.py
from __future__ import annotations

MODEL_SECTIONS: tuple[str, ...] = (
    "diagram",
    "types",
    "roots",
)

ATTRIBUTE_KINDS: tuple[str, ...] = ("port", "part", "property")

# One nesting level in emitted PlantUML blocks.
INDENT = "  "

TITLE_DEFAULT = "Component diagram"
FORMAT_DEFAULT = "puml"
OUT_DIR_DEFAULT = "generated"
FENCE_LANG = "plantuml"
