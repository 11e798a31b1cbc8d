from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from ..constants import TITLE_DEFAULT
from ..model_view import build_type_index, get_roots
from .component import ComponentDiagram, get_diagram_text

Model = dict[str, Any]
RenderFn = Callable[[Model, "RenderConfig"], str]


@dataclass(frozen=True)
class RenderConfig:
    # None: fall back to the title of the diagram being rendered.
    title: Optional[str] = None
    skin_params: dict[str, Any] = field(default_factory=dict)
    root_ids: Optional[tuple[str, ...]] = None
    legacy_single_root: bool = False


def render_config_from_model(model: Model, **overrides: Any) -> RenderConfig:
    """Build a RenderConfig from `model.diagram`, then apply non-None overrides.

    `skin_params` overrides are merged over the model's, not substituted.
    Raises TypeError for a `diagram` section of the wrong shape.
    """
    section = model.get("diagram") or {}
    if not isinstance(section, dict):
        raise TypeError("model.diagram must be a mapping")

    title = section.get("title")
    skin = section.get("skinparams") or {}
    if not isinstance(skin, dict):
        raise TypeError("model.diagram.skinparams must be a mapping")

    legacy = section.get("legacy_single_root", False)
    if not isinstance(legacy, bool):
        raise TypeError(
            "model.diagram.legacy_single_root must be true or false, "
            f"got {legacy!r}"
        )

    values: dict[str, Any] = {
        "title": title if isinstance(title, str) and title else None,
        "skin_params": dict(skin),
        "legacy_single_root": legacy,
    }
    for key, value in overrides.items():
        if value is None:
            continue
        if key == "skin_params":
            values["skin_params"] = {**values["skin_params"], **value}
        else:
            values[key] = value
    return RenderConfig(**values)


@dataclass(frozen=True)
class DiagramSpec:
    diagram_id: str
    title: str
    filename: str
    render: RenderFn


def _render_component(model: Model, cfg: RenderConfig) -> str:
    index = build_type_index(model)
    roots = get_roots(model, index, cfg.root_ids)
    if cfg.legacy_single_root:
        return ComponentDiagram(roots, title=cfg.title or TITLE_DEFAULT).diagram_text()
    return get_diagram_text(roots)


DIAGRAMS: list[DiagramSpec] = [
    DiagramSpec(
        diagram_id="component",
        title=TITLE_DEFAULT,
        filename="component",
        render=_render_component,
    ),
]
