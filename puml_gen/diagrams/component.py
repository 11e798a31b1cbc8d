from __future__ import annotations

from typing import Callable, Iterable, Optional, Union

from ..constants import TITLE_DEFAULT
from ..model_view import (
    ConnectorEnd,
    StructuralType,
    all_attributes,
)
from ..puml_fmt import alias_prefix, display_name, indent_block, ref_name, stereo_names

StereotypeFn = Callable[[object, bool], str]


class CycleGuard:
    """Types already expanded during one top-level conversion.

    Keyed by object identity, never by name. Create one per conversion.
    """

    def __init__(self) -> None:
        self._expanded: dict[int, StructuralType] = {}

    def was_expanded(self, stype: StructuralType) -> bool:
        return id(stype) in self._expanded

    def mark_expanded(self, stype: StructuralType) -> None:
        # Holding the object keeps its id() from being reused while we run.
        self._expanded[id(stype)] = stype

    def __len__(self) -> int:
        return len(self._expanded)


def port_ref(end: ConnectorEnd) -> Optional[str]:
    """Reference token for one connector end, or None when it has no role."""
    if end.role is None:
        return None
    port = ref_name(end.role.name)
    if end.part_with_port is not None:
        return f"{ref_name(end.part_with_port.name)}.{port}"
    return port


class ComponentComposer:
    """Render one structural type (and, recursively, its parts) as a block."""

    def __init__(
        self,
        guard: Optional[CycleGuard] = None,
        *,
        stereotype_text: StereotypeFn = stereo_names,
    ) -> None:
        self.guard = guard if guard is not None else CycleGuard()
        self.stereotype_text = stereotype_text

    def render(self, prefix: str, stype: StructuralType) -> str:
        """Return the `component ... { ... }` block for `stype`.

        `prefix` is the `"<part>: "` label of the owning part ("" for a root);
        it only affects the displayed name and the port aliases.
        """
        # Marked on entry: a part typed by an enclosing type is never
        # re-expanded, including the root itself.
        self.guard.mark_expanded(stype)

        out: list[str] = [f"component {display_name(prefix + stype.name)} {{\n"]
        out.append(self.stereotype_text(stype, False))

        attributes = all_attributes(stype)
        qualifier = alias_prefix(prefix) if prefix else ""
        for port in attributes:
            if not port.is_port:
                continue
            decl = f"port {display_name(port.name)}"
            if prefix:
                decl = f"{decl} as {qualifier}{ref_name(port.name)}"
            out.append(indent_block(decl + "\n"))

        for attribute in attributes:
            part_type = attribute.type
            if attribute.is_port or not isinstance(part_type, StructuralType):
                continue
            if self.guard.was_expanded(part_type):
                continue
            sub = self.render(f"{attribute.name}: ", part_type)
            out.append(indent_block(sub))

        for connector in stype.connectors:
            if len(connector.ends) != 2:
                continue
            ref_s = port_ref(connector.ends[0])
            ref_t = port_ref(connector.ends[1])
            if not ref_s or not ref_t:
                continue
            out.append(indent_block(f"{ref_s} -- {ref_t}\n"))

        out.append("}\n")
        return "".join(out)


def get_diagram_text(
    roots: Iterable[StructuralType],
    *,
    stereotype_text: StereotypeFn = stereo_names,
) -> str:
    """Render every root, in order, sharing one fresh CycleGuard."""
    composer = ComponentComposer(CycleGuard(), stereotype_text=stereotype_text)
    return "".join(composer.render("", root) for root in roots)


class ComponentDiagram:
    """Single-root entry point kept for existing callers.

    Accepts one type or a collection, but `diagram_text()` renders only the
    first element of the collection. Use `get_diagram_text()` for several
    roots.
    """

    def __init__(
        self,
        source: Union[StructuralType, Iterable[StructuralType]],
        title: str = TITLE_DEFAULT,
        *,
        stereotype_text: StereotypeFn = stereo_names,
    ) -> None:
        if isinstance(source, StructuralType):
            source = [source]
        self.source: list[StructuralType] = list(source)
        self.title = title
        self.stereotype_text = stereotype_text

    def diagram_text(self) -> str:
        if not self.source:
            return ""
        composer = ComponentComposer(CycleGuard(), stereotype_text=self.stereotype_text)
        return composer.render("", self.source[0])
