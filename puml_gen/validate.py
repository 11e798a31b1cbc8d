# puml_gen/validate.py
from __future__ import annotations

from typing import Any, Optional, Tuple, Literal
from dataclasses import dataclass, field

from .constants import ATTRIBUTE_KINDS
from .model_view import StructuralType, build_type_index, ports_of
from .puml_fmt import ref_name

Severity = Literal["error", "warning"]


@dataclass(frozen=True)
class ValidationIssue:
    """Structured validation issue for callers that want more than strings."""

    severity: Severity
    code: str
    message: str
    path: str = ""
    hint: Optional[str] = None


@dataclass(frozen=True)
class ValidateConfig:
    """Validation configuration.

    The CLI uses the `validate_model()` wrapper, which returns
    `(errors, warnings)` as lists of strings.
    """

    # Rule controls
    ignore: set[str] = field(default_factory=set)
    escalate: set[str] = field(default_factory=set)

    # Report explicit parts whose type is not a declared type id.
    check_part_types: bool = True


def validate_model_issues(
    model: dict[str, Any], cfg: Optional[ValidateConfig] = None
) -> list[ValidationIssue]:
    """Return structured validation issues.

    Shape problems are errors (the model cannot be built). Dangling references
    and unsupported shapes are warnings: rendering skips those elements.
    """

    cfg = cfg or ValidateConfig()
    issues: list[ValidationIssue] = []

    def emit(
        severity: Severity,
        code: str,
        message: str,
        path: str = "",
        hint: Optional[str] = None,
    ) -> None:
        if code in cfg.ignore:
            return
        final_severity: Severity = (
            "error" if (severity == "warning" and code in cfg.escalate) else severity
        )
        issues.append(
            ValidationIssue(
                severity=final_severity,
                code=code,
                message=message,
                path=path,
                hint=hint,
            )
        )

    diagram = model.get("diagram")
    if diagram is not None and not isinstance(diagram, dict):
        emit("error", "E_DIAGRAM_NOT_MAPPING", "model.diagram must be a mapping", path="/diagram")
    elif isinstance(diagram, dict):
        skin = diagram.get("skinparams")
        if skin is not None and not isinstance(skin, dict):
            emit(
                "error",
                "E_DIAGRAM_SKINPARAMS_NOT_MAPPING",
                "model.diagram.skinparams must be a mapping",
                path="/diagram/skinparams",
            )
        legacy = diagram.get("legacy_single_root")
        if legacy is not None and not isinstance(legacy, bool):
            emit(
                "error",
                "E_DIAGRAM_LEGACY_NOT_BOOL",
                f"model.diagram.legacy_single_root must be true or false, got {legacy!r}",
                path="/diagram/legacy_single_root",
                hint="use an unquoted YAML boolean",
            )

    types = model.get("types", []) or []
    if not isinstance(types, list):
        emit("error", "E_TYPES_NOT_LIST", "model.types must be a list", path="/types")
        return issues

    type_ids: dict[str, int] = {}
    for i, item in enumerate(types):
        if not isinstance(item, dict):
            emit(
                "warning",
                "W_TYPES_ITEM_NOT_MAPPING",
                "model.types contains a non-mapping item; skipping",
                path=f"/types/{i}",
            )
            continue

        type_id = item.get("id")
        if not isinstance(type_id, str) or not type_id:
            emit(
                "error",
                "E_TYPE_MISSING_ID",
                "model.types item missing string `id`",
                path=f"/types/{i}/id",
            )
            continue

        if type_id in type_ids:
            emit(
                "error",
                "E_TYPE_DUPLICATE_ID",
                f"duplicate type id {type_id!r} (also in types[{type_ids[type_id]}])",
                path=f"/types/{i}/id",
            )
        else:
            type_ids[type_id] = i

    for i, item in enumerate(types):
        if not isinstance(item, dict) or not isinstance(item.get("id"), str):
            continue
        type_id = item["id"]

        for g_i, general in enumerate(item.get("generals", []) or []):
            if not (isinstance(general, str) and general in type_ids):
                emit(
                    "warning",
                    "W_GENERAL_UNKNOWN_TYPE",
                    f"type {type_id!r} generalizes unknown type id {general!r}",
                    path=f"/types/{i}/generals/{g_i}",
                )

        attributes = item.get("attributes", []) or []
        if not isinstance(attributes, list):
            emit(
                "error",
                "E_ATTRIBUTES_NOT_LIST",
                f"type {type_id!r} attributes must be a list",
                path=f"/types/{i}/attributes",
            )
            attributes = []

        for a_i, attr in enumerate(attributes):
            a_path = f"/types/{i}/attributes/{a_i}"
            if not isinstance(attr, dict):
                emit(
                    "warning",
                    "W_ATTRIBUTE_NOT_MAPPING",
                    f"type {type_id!r} contains a non-mapping attribute; skipping",
                    path=a_path,
                )
                continue

            name = attr.get("name")
            if not isinstance(name, str) or not name:
                emit(
                    "error",
                    "E_ATTRIBUTE_MISSING_NAME",
                    f"type {type_id!r} attribute is missing string `name`",
                    path=f"{a_path}/name",
                )

            kind = attr.get("kind")
            if kind is not None and kind not in ATTRIBUTE_KINDS:
                emit(
                    "error",
                    "E_ATTRIBUTE_KIND_UNKNOWN",
                    f"type {type_id!r} attribute {name!r} has unknown kind {kind!r}",
                    path=f"{a_path}/kind",
                    hint=f"use one of: {', '.join(ATTRIBUTE_KINDS)}",
                )

            attr_type = attr.get("type")
            if (
                cfg.check_part_types
                and kind == "part"
                and not (isinstance(attr_type, str) and attr_type in type_ids)
            ):
                emit(
                    "warning",
                    "W_PART_TYPE_UNKNOWN",
                    f"part {type_id}.{name} references unknown type {attr_type!r}; "
                    "it will not be rendered",
                    path=f"{a_path}/type",
                )

        connectors = item.get("connectors", []) or []
        if not isinstance(connectors, list):
            emit(
                "error",
                "E_CONNECTORS_NOT_LIST",
                f"type {type_id!r} connectors must be a list",
                path=f"/types/{i}/connectors",
            )
            continue

        for c_i, conn in enumerate(connectors):
            if not isinstance(conn, dict):
                continue
            raw_ends = conn.get("ends", []) or []
            # Ends that are not mappings are dropped when the model is built.
            n_ends = (
                sum(1 for end in raw_ends if isinstance(end, dict))
                if isinstance(raw_ends, list)
                else 0
            )
            if n_ends != 2:
                emit(
                    "warning",
                    "W_CONNECTOR_ARITY",
                    f"type {type_id!r} connector {conn.get('name')!r} has {n_ends} "
                    "end(s); only binary connectors are rendered",
                    path=f"/types/{i}/connectors/{c_i}/ends",
                )

    roots = model.get("roots")
    if roots is not None:
        if not isinstance(roots, list):
            emit("error", "E_ROOTS_NOT_LIST", "model.roots must be a list", path="/roots")
        else:
            for r_i, rid in enumerate(roots):
                if not (isinstance(rid, str) and rid in type_ids):
                    emit(
                        "error",
                        "E_ROOT_UNKNOWN_TYPE",
                        f"root references unknown type id {rid!r}",
                        path=f"/roots/{r_i}",
                    )

    if any(iss.severity == "error" for iss in issues):
        return issues

    # Reference checks need the resolved structure.
    try:
        index = build_type_index(model)
    except (TypeError, ValueError) as e:
        emit("error", "E_MODEL_NOT_BUILDABLE", str(e), path="/types")
        return issues

    for i, item in enumerate(types):
        if not isinstance(item, dict):
            continue
        stype = index[item["id"]]
        _check_port_refs(stype, i, emit)
        _check_connector_ends(stype, i, emit)

    return issues


def _check_port_refs(stype: StructuralType, i: int, emit: Any) -> None:
    seen: dict[str, str] = {}
    for port in ports_of(stype):
        ref = ref_name(port.name)
        if ref in seen and seen[ref] != port.name:
            emit(
                "warning",
                "W_PORT_REF_COLLISION",
                f"type {stype.id!r} ports {seen[ref]!r} and {port.name!r} "
                f"share the reference {ref!r}",
                path=f"/types/{i}/attributes",
                hint="rename one of the ports",
            )
        seen.setdefault(ref, port.name)


def _check_connector_ends(stype: StructuralType, i: int, emit: Any) -> None:
    for c_i, conn in enumerate(stype.connectors):
        if len(conn.ends) != 2:
            continue
        for e_i, end in enumerate(conn.ends):
            path = f"/types/{i}/connectors/{c_i}/ends/{e_i}"
            if end.role is None:
                emit(
                    "warning",
                    "W_CONNECTOR_END_ROLE_UNKNOWN",
                    f"type {stype.id!r} connector {conn.name!r} end {e_i} has no "
                    "resolvable role; the connector will not be rendered",
                    path=f"{path}/role",
                )
            elif end.part_with_port is None and not end.role.is_port:
                emit(
                    "warning",
                    "W_CONNECTOR_END_ROLE_NOT_PORT",
                    f"type {stype.id!r} connector {conn.name!r} end {e_i} role "
                    f"{end.role.name!r} is not a port",
                    path=f"{path}/role",
                )


def validate_model(model: dict[str, Any]) -> Tuple[list[str], list[str]]:
    """Perform lightweight structural validation to keep the model diagram-safe."""
    issues = validate_model_issues(model)
    errors = [iss.message for iss in issues if iss.severity == "error"]
    warnings = [iss.message for iss in issues if iss.severity == "warning"]
    return errors, warnings
