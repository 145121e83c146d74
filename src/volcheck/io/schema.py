"""Structural validation of scene documents.

Mirrors the checks the loader relies on, but collects every problem
instead of stopping at the first one.  Messages use the ``ERROR:`` /
``WARNING:`` prefixes of the package validators.
"""

from __future__ import annotations

from typing import Any, Dict, List, Tuple

LENGTH_UNITS = {"mm": 1.0, "cm": 10.0, "m": 1000.0, "in": 25.4, "inch": 25.4}
ANGLE_UNITS = {"deg", "rad"}

SOLID_FIELDS: Dict[str, Tuple[str, ...]] = {
    "box": ("x", "y", "z"),
    "orb": ("r",),
    "sphere": ("rmax",),
    "tube": ("rmax", "z"),
    "subtraction": ("first", "second"),
    "intersection": ("first", "second"),
    "scaled": ("solid", "scale"),
}

_REF_FIELDS = {
    "subtraction": ("first", "second"),
    "intersection": ("first", "second"),
    "scaled": ("solid",),
}


def _is_number(value: Any) -> bool:
    return not isinstance(value, bool) and isinstance(value, (int, float))


def _check_vector(label: str, value: Any, messages: List[str]) -> bool:
    if value is None:
        return True
    if not isinstance(value, (list, tuple)) or len(value) != 3 or not all(_is_number(v) for v in value):
        messages.append(f"ERROR: {label} must be a list of three numbers, got {value!r}")
        return False
    return True


def _validate_solid(name: str, spec: Any, solids: Dict[str, Any], messages: List[str]) -> bool:
    if not isinstance(spec, dict):
        messages.append(f"ERROR: solid '{name}' must be a mapping")
        return False
    kind = spec.get("type")
    if kind not in SOLID_FIELDS:
        messages.append(f"ERROR: solid '{name}' has unknown type {kind!r}")
        return False
    ok = True
    for key in SOLID_FIELDS[kind]:
        if key not in spec:
            messages.append(f"ERROR: solid '{name}' ({kind}) missing required field '{key}'")
            ok = False
    refs = _REF_FIELDS.get(kind, ())
    for key, value in spec.items():
        if key == "type" or key in refs:
            continue
        if key in ("position", "rotation"):
            ok = _check_vector(f"solid '{name}' {key}", value, messages) and ok
        elif not _is_number(value):
            messages.append(f"ERROR: solid '{name}' field '{key}' must be a number, got {value!r}")
            ok = False
    for key in refs:
        ref = spec.get(key)
        if ref is not None and ref not in solids:
            messages.append(f"ERROR: solid '{name}' refers to unknown solid '{ref}'")
            ok = False
    return ok


def _validate_volume(name: str, spec: Any, solids: Dict[str, Any], volumes: Dict[str, Any],
                     messages: List[str]) -> bool:
    if not isinstance(spec, dict):
        messages.append(f"ERROR: volume '{name}' must be a mapping")
        return False
    ok = True
    solid = spec.get("solid")
    if solid is None:
        messages.append(f"ERROR: volume '{name}' missing required field 'solid'")
        ok = False
    elif solid not in solids:
        messages.append(f"ERROR: volume '{name}' refers to unknown solid '{solid}'")
        ok = False
    children = spec.get("children", []) or []
    if not isinstance(children, list):
        messages.append(f"ERROR: volume '{name}' children must be a list")
        return False
    names = set()
    for idx, child in enumerate(children):
        label = f"volume '{name}' child {idx}"
        if not isinstance(child, dict):
            messages.append(f"ERROR: {label} must be a mapping")
            ok = False
            continue
        ref = child.get("volume")
        if ref is None:
            messages.append(f"ERROR: {label} missing required field 'volume'")
            ok = False
        elif ref not in volumes:
            messages.append(f"ERROR: {label} refers to unknown volume '{ref}'")
            ok = False
        ok = _check_vector(f"{label} position", child.get("position"), messages) and ok
        ok = _check_vector(f"{label} rotation", child.get("rotation"), messages) and ok
        copy = child.get("copy", 0)
        if isinstance(copy, bool) or not isinstance(copy, int):
            messages.append(f"ERROR: {label} copy must be an integer, got {copy!r}")
            ok = False
        pname = child.get("name")
        if pname is not None:
            if pname in names:
                messages.append(f"WARNING: {label} reuses placement name '{pname}'")
            names.add(pname)
    return ok


def validate_document(doc: Any) -> Tuple[bool, List[str]]:
    """Validate a merged scene document (includes already resolved).

    Returns ``(ok, messages)``; warnings do not make ``ok`` false.
    """

    messages: List[str] = []
    if not isinstance(doc, dict):
        return False, ["ERROR: scene document must be a mapping"]

    ok = True
    lunit = doc.get("lunit", "mm")
    if not isinstance(lunit, str) or lunit not in LENGTH_UNITS:
        messages.append(f"ERROR: unknown length unit {lunit!r}")
        ok = False
    aunit = doc.get("aunit", "deg")
    if not isinstance(aunit, str) or aunit not in ANGLE_UNITS:
        messages.append(f"ERROR: unknown angle unit {aunit!r}")
        ok = False

    solids = doc.get("solids")
    volumes = doc.get("volumes")
    if not isinstance(solids, dict) or not solids:
        messages.append("ERROR: scene must define a non-empty 'solids' mapping")
        return False, messages
    if not isinstance(volumes, dict) or not volumes:
        messages.append("ERROR: scene must define a non-empty 'volumes' mapping")
        return False, messages

    for name, spec in solids.items():
        ok = _validate_solid(name, spec, solids, messages) and ok
    for name, spec in volumes.items():
        ok = _validate_volume(name, spec, solids, volumes, messages) and ok

    world = doc.get("world")
    if world is None:
        messages.append("ERROR: scene missing required field 'world'")
        ok = False
    elif world not in volumes:
        messages.append(f"ERROR: world refers to unknown volume '{world}'")
        ok = False

    return ok, messages


__all__ = ["LENGTH_UNITS", "ANGLE_UNITS", "SOLID_FIELDS", "validate_document"]
