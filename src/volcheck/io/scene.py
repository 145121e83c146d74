"""Scene description loader.

A scene is a YAML (or JSON) document with three sections::

    lunit: mm
    solids:
      WorldBox: {type: box, x: 200, y: 200, z: 200}
      Ball: {type: orb, r: 10}
    volumes:
      World:
        solid: WorldBox
        children:
          - {name: ball_phys, volume: BallVol, position: [0, 0, 30]}
      BallVol: {solid: Ball}
    world: World

Box and tube lengths are full lengths; positions are in ``lunit``,
rotations ``[rx, ry, rz]`` in ``aunit`` (degrees by default) applied about
x, then y, then z.  ``includes`` lists further scene files whose solids
and volumes are merged in; they are resolved relative to the including
file unless ``usecwd`` is set.

Volumes can be placed any number of times; the loader expands them into a
tree of :class:`~volcheck.placement.Placement` objects.
"""

from __future__ import annotations

import json
import logging
import math
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from volcheck.boolean import ScaledSolid, intersect, subtract
from volcheck.errors import LoaderError, SolidError
from volcheck.geom import point
from volcheck.io.schema import ANGLE_UNITS, LENGTH_UNITS, validate_document
from volcheck.placement import Placement
from volcheck.solids import Box, Orb, Solid, Sphere, Tube
from volcheck.xform import Matrix, RigidTransform

logger = logging.getLogger(__name__)

# (length scale to mm, angle scale to degrees)
Units = Tuple[float, float]


def _read_document(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as fp:
            if path.suffix.lower() == ".json":
                data = json.load(fp)
            else:
                data = yaml.safe_load(fp)
    except OSError as exc:
        raise LoaderError(f"cannot read scene file {path}: {exc}") from exc
    except (yaml.YAMLError, json.JSONDecodeError) as exc:
        raise LoaderError(f"cannot parse scene file {path}: {exc}") from exc
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise LoaderError(f"scene file {path} must contain a mapping at top level")
    return data


def _units(doc: Dict[str, Any], path: Path) -> Units:
    lunit = doc.get("lunit", "mm")
    aunit = doc.get("aunit", "deg")
    if not isinstance(lunit, str) or lunit not in LENGTH_UNITS:
        raise LoaderError(f"{path}: unknown length unit {lunit!r}")
    if not isinstance(aunit, str) or aunit not in ANGLE_UNITS:
        raise LoaderError(f"{path}: unknown angle unit {aunit!r}")
    return LENGTH_UNITS[lunit], (180.0 / math.pi if aunit == "rad" else 1.0)


class _SceneDocument:
    """Solids and volumes merged from a scene file and its includes."""

    def __init__(self) -> None:
        self.solids: Dict[str, Tuple[Any, Units]] = {}
        self.volumes: Dict[str, Tuple[Any, Units]] = {}
        self.world: Optional[str] = None
        self.lunit = "mm"
        self.aunit = "deg"

    def merge(self, doc: Dict[str, Any], units: Units, source: Path) -> None:
        for section, target in (("solids", self.solids), ("volumes", self.volumes)):
            entries = doc.get(section) or {}
            if not isinstance(entries, dict):
                raise LoaderError(f"{source}: '{section}' must be a mapping")
            for name, spec in entries.items():
                if name in target:
                    logger.warning("%s: %s entry '%s' overrides an earlier definition",
                                   source, section[:-1], name)
                target[name] = (spec, units)

    def as_dict(self) -> Dict[str, Any]:
        doc: Dict[str, Any] = {
            "lunit": self.lunit,
            "aunit": self.aunit,
            "solids": {name: spec for name, (spec, _) in self.solids.items()},
            "volumes": {name: spec for name, (spec, _) in self.volumes.items()},
        }
        if self.world is not None:
            doc["world"] = self.world
        return doc


def _collect(path: Path, usecwd: bool, merged: _SceneDocument, active: List[Path]) -> None:
    resolved = path.resolve()
    if resolved in active:
        raise LoaderError(f"include cycle through {path}")
    doc = _read_document(path)
    units = _units(doc, path)
    includes = doc.get("includes") or []
    if not isinstance(includes, list):
        raise LoaderError(f"{path}: 'includes' must be a list")
    base = Path.cwd() if usecwd else path.parent
    active.append(resolved)
    for inc in includes:
        inc_path = Path(inc)
        if not inc_path.is_absolute():
            inc_path = base / inc_path
        if not inc_path.exists():
            raise LoaderError(f"{path}: included file not found: {inc_path}")
        _collect(inc_path, usecwd, merged, active)
    active.pop()
    merged.merge(doc, units, path)
    if "world" in doc:
        merged.world = doc["world"]


def load_document(path: Path | str, *, usecwd: bool = False) -> _SceneDocument:
    """Read ``path`` and everything it includes."""
    path = Path(path)
    if not path.exists():
        raise LoaderError(f"scene file not found: {path}")
    merged = _SceneDocument()
    top = _read_document(path)
    merged.lunit = top.get("lunit", "mm")
    merged.aunit = top.get("aunit", "deg")
    _collect(path, usecwd, merged, [])
    return merged


def _number(spec: Dict[str, Any], key: str, owner: str, default: Optional[float] = None) -> float:
    value = spec.get(key, default)
    if value is None:
        raise LoaderError(f"solid '{owner}' missing required field '{key}'")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise LoaderError(f"solid '{owner}' field '{key}' must be a number, got {value!r}")
    return float(value)


def _transform(spec: Dict[str, Any], units: Units, owner: str) -> Matrix:
    lscale, ascale = units
    position = spec.get("position") or (0.0, 0.0, 0.0)
    rotation = spec.get("rotation") or (0.0, 0.0, 0.0)
    for label, vec in (("position", position), ("rotation", rotation)):
        if not isinstance(vec, (list, tuple)) or len(vec) != 3:
            raise LoaderError(f"{owner}: {label} must be a list of three numbers, got {vec!r}")
    try:
        return RigidTransform([float(c) * lscale for c in position],
                              [float(c) * ascale for c in rotation])
    except (TypeError, ValueError) as exc:
        raise LoaderError(f"{owner}: bad position/rotation: {exc}") from exc


class _SolidBuilder:

    def __init__(self, doc: _SceneDocument):
        self.doc = doc
        self.built: Dict[str, Solid] = {}
        self.active: List[str] = []

    def get(self, name: str) -> Solid:
        if name in self.built:
            return self.built[name]
        if name not in self.doc.solids:
            raise LoaderError(f"unknown solid '{name}'")
        if name in self.active:
            raise LoaderError(f"solid '{name}' refers to itself: {' -> '.join(self.active + [name])}")
        self.active.append(name)
        try:
            spec, units = self.doc.solids[name]
            solid = self._build(name, spec, units)
        except SolidError as exc:
            raise LoaderError(f"cannot build solid '{name}': {exc}") from exc
        finally:
            self.active.pop()
        self.built[name] = solid
        return solid

    def _build(self, name: str, spec: Any, units: Units) -> Solid:
        if not isinstance(spec, dict):
            raise LoaderError(f"solid '{name}' must be a mapping")
        kind = spec.get("type")
        ls = units[0]
        if kind == "box":
            return Box(name,
                       _number(spec, "x", name) * ls / 2.0,
                       _number(spec, "y", name) * ls / 2.0,
                       _number(spec, "z", name) * ls / 2.0)
        if kind == "orb":
            return Orb(name, _number(spec, "r", name) * ls)
        if kind == "sphere":
            return Sphere(name,
                          _number(spec, "rmin", name, 0.0) * ls,
                          _number(spec, "rmax", name) * ls)
        if kind == "tube":
            return Tube(name,
                        _number(spec, "rmin", name, 0.0) * ls,
                        _number(spec, "rmax", name) * ls,
                        _number(spec, "z", name) * ls / 2.0)
        if kind in ("subtraction", "intersection"):
            first = self.get(spec.get("first"))
            second = self.get(spec.get("second"))
            xform = _transform(spec, units, f"solid '{name}'")
            combine = subtract if kind == "subtraction" else intersect
            return combine(first, second, xform, name=name)
        if kind == "scaled":
            return ScaledSolid(self.get(spec.get("solid")),
                               _number(spec, "scale", name),
                               center=point(0, 0, 0), name=name)
        raise LoaderError(f"solid '{name}' has unknown type {kind!r}")


def _copy_number(child: Dict[str, Any], where: str) -> int:
    value = child.get("copy", 0)
    if isinstance(value, bool) or not isinstance(value, int):
        raise LoaderError(f"{where}: copy must be an integer, got {value!r}")
    return value


def _build_tree(doc: _SceneDocument, solids: _SolidBuilder, volume: str, pname: str,
                xform: Matrix, copy_no: int, active: List[str]) -> Placement:
    if volume not in doc.volumes:
        raise LoaderError(f"unknown volume '{volume}'")
    if volume in active:
        raise LoaderError(f"volume '{volume}' places itself: {' -> '.join(active + [volume])}")
    spec, units = doc.volumes[volume]
    if not isinstance(spec, dict) or "solid" not in spec:
        raise LoaderError(f"volume '{volume}' must be a mapping with a 'solid' field")

    node = Placement(pname, solids.get(spec["solid"]), xform, copy_no=copy_no)
    children = spec.get("children") or []
    if not isinstance(children, list):
        raise LoaderError(f"volume '{volume}' children must be a list")
    active.append(volume)
    for idx, child in enumerate(children):
        if not isinstance(child, dict) or "volume" not in child:
            raise LoaderError(f"volume '{volume}' child {idx} must be a mapping with a 'volume' field")
        ref = child["volume"]
        node.add_child(_build_tree(doc, solids, ref,
                                   child.get("name") or f"{ref}_phys",
                                   _transform(child, units, f"placement in volume '{volume}'"),
                                   _copy_number(child, f"placement in volume '{volume}'"),
                                   active))
    active.pop()
    return node


def load_scene(path: Path | str, *, validate: bool = False, usecwd: bool = False) -> Placement:
    """Load a scene file and return the world placement.

    With ``validate`` the merged document is checked by
    :func:`volcheck.io.schema.validate_document` first and every problem is
    reported in one :class:`LoaderError`.
    """

    doc = load_document(path, usecwd=usecwd)
    if validate:
        ok, messages = validate_document(doc.as_dict())
        for msg in messages:
            if msg.startswith("WARNING"):
                logger.warning("%s", msg)
        if not ok:
            raise LoaderError(f"scene {path} failed validation", messages)
    if doc.world is None:
        raise LoaderError(f"scene {path} does not name a world volume")

    solids = _SolidBuilder(doc)
    root = _build_tree(doc, solids, doc.world, doc.world, Matrix(), 0, [])
    logger.debug("loaded %s: %d solid(s), %d placement(s)",
                 path, len(solids.built), sum(1 for _ in root.walk()))
    return root


__all__ = ["load_document", "load_scene"]
