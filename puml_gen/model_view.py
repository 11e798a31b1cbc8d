from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Optional, Union


@dataclass(eq=False)
class StructuralType:
    """A class/component that may own attributes (ports, parts) and connectors.

    Compared and hashed by identity: two types may share a name.
    """

    id: str
    name: str
    attributes: list["Attribute"] = field(default_factory=list, repr=False)
    connectors: list["Connector"] = field(default_factory=list, repr=False)
    stereotypes: list[str] = field(default_factory=list)
    generals: list["StructuralType"] = field(default_factory=list, repr=False)


@dataclass(eq=False)
class Attribute:
    name: str
    kind: str = "property"
    # A resolved StructuralType, an unresolved type name, or nothing.
    type: Union[StructuralType, str, None] = None

    @property
    def is_port(self) -> bool:
        return self.kind == "port"

    @property
    def is_part(self) -> bool:
        return not self.is_port and isinstance(self.type, StructuralType)


@dataclass(eq=False)
class ConnectorEnd:
    role: Optional[Attribute] = None
    part_with_port: Optional[Attribute] = None


@dataclass(eq=False)
class Connector:
    name: str = ""
    ends: list[ConnectorEnd] = field(default_factory=list)


def all_attributes(stype: StructuralType) -> list[Attribute]:
    """Own attributes followed by those inherited through `generals`.

    Depth-first over generals in declaration order; each attribute appears
    once and generalization loops are tolerated.
    """
    out: list[Attribute] = []
    seen_attrs: set[int] = set()
    seen_types: set[int] = set()

    def visit(t: StructuralType) -> None:
        if id(t) in seen_types:
            return
        seen_types.add(id(t))
        for attr in t.attributes:
            if id(attr) not in seen_attrs:
                seen_attrs.add(id(attr))
                out.append(attr)
        for general in t.generals:
            visit(general)

    visit(stype)
    return out


def ports_of(stype: StructuralType) -> list[Attribute]:
    return [a for a in all_attributes(stype) if a.is_port]


def find_attribute(stype: StructuralType, name: Any) -> Optional[Attribute]:
    """First attribute (own, then inherited) named `name`."""
    if not isinstance(name, str) or not name:
        return None
    for attr in all_attributes(stype):
        if attr.name == name:
            return attr
    return None


def _str_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [v for v in value if isinstance(v, str) and v]


def _type_items(model: dict[str, Any]) -> list[dict[str, Any]]:
    items = model.get("types", []) or []
    if not isinstance(items, list):
        raise TypeError("model.types must be a list")
    return [item for item in items if isinstance(item, dict)]


def _resolve_end(
    owner: StructuralType, raw: dict[str, Any]
) -> ConnectorEnd:
    part_name = raw.get("part")
    role_name = raw.get("role")

    if part_name is None:
        return ConnectorEnd(role=find_attribute(owner, role_name))

    part = find_attribute(owner, part_name)
    role: Optional[Attribute] = None
    if part is not None and isinstance(part.type, StructuralType):
        role = find_attribute(part.type, role_name)
    return ConnectorEnd(role=role, part_with_port=part)


def build_type_index(model: dict[str, Any]) -> dict[str, StructuralType]:
    """Build the structural view of `model.types`, keyed by type id.

    Two passes: every type object exists before any reference is resolved,
    so cyclic and self references are representable.
    """
    items = _type_items(model)
    index: dict[str, StructuralType] = {}

    for i, item in enumerate(items):
        type_id = item.get("id")
        if not isinstance(type_id, str) or not type_id:
            raise ValueError(f"model.types[{i}] is missing a string 'id'")
        if type_id in index:
            raise ValueError(f"duplicate type id {type_id!r} at model.types[{i}]")

        name = item.get("name")
        index[type_id] = StructuralType(
            id=type_id,
            name=name if isinstance(name, str) and name else type_id,
            stereotypes=_str_list(item.get("stereotypes")),
        )

    # Attributes and generals first: connector ends look attributes up,
    # possibly on other (and inherited) types.
    for item in items:
        stype = index[item["id"]]
        stype.generals = [
            index[g] for g in _str_list(item.get("generals")) if g in index
        ]
        for raw in item.get("attributes", []) or []:
            if not isinstance(raw, dict):
                continue
            stype.attributes.append(_build_attribute(raw, index))

    for item in items:
        stype = index[item["id"]]
        for raw in item.get("connectors", []) or []:
            if not isinstance(raw, dict):
                continue
            ends = [
                _resolve_end(stype, end)
                for end in raw.get("ends", []) or []
                if isinstance(end, dict)
            ]
            name = raw.get("name")
            stype.connectors.append(
                Connector(name=name if isinstance(name, str) else "", ends=ends)
            )

    return index


def _build_attribute(
    raw: dict[str, Any], index: dict[str, StructuralType]
) -> Attribute:
    name = raw.get("name")
    type_ref = raw.get("type")
    resolved: Union[StructuralType, str, None] = None
    if isinstance(type_ref, str) and type_ref:
        resolved = index.get(type_ref, type_ref)

    kind = raw.get("kind")
    if not isinstance(kind, str) or not kind:
        kind = "part" if isinstance(resolved, StructuralType) else "property"

    return Attribute(
        name=name if isinstance(name, str) else "",
        kind=kind,
        type=resolved,
    )


def get_roots(
    model: dict[str, Any],
    index: dict[str, StructuralType],
    root_ids: Optional[Iterable[str]] = None,
) -> list[StructuralType]:
    """Resolve the root types to render, in order.

    Explicit `root_ids` win over `model.roots`; with neither, every type is a
    root in declaration order.
    """
    if root_ids is None:
        raw_roots = model.get("roots")
        if raw_roots is None:
            return list(index.values())
        if not isinstance(raw_roots, list):
            raise TypeError("model.roots must be a list")
        root_ids = raw_roots

    roots: list[StructuralType] = []
    for rid in root_ids:
        if rid not in index:
            raise KeyError(f"Unknown root type id {rid!r}")
        roots.append(index[rid])
    return roots
