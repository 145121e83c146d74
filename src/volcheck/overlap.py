"""Sampling-based overlap check for placement trees.

For every placement below the root, random points are drawn on the
placement's surface and mapped into its mother's frame.  A point that lies
outside the mother by more than ``tolerance`` is a protrusion; a point that
lies inside a sister placement by more than ``tolerance`` is an intrusion.
Each confirmed overlap produces an :class:`OverlapRecord` carrying an
approximate overlap region (placement minus mother, or placement
intersected with sister) for display.

The registry and the check parameters are passed explicitly down the
recursion; nothing is accumulated in module state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterator, List, Optional, Tuple

from volcheck.boolean import intersect, scale, subtract, surface_centroid
from volcheck.errors import ConfigurationError, SolidError
from volcheck.placement import YELLOW, Placement, VisAttributes
from volcheck.solids import EInside, Solid
from volcheck.xform import Matrix

logger = logging.getLogger(__name__)

REGION_SCALE = 1.001
FLAG_COLOUR = (1.0, 0.0, 0.0, 0.5)
HIGHLIGHT_COLOUR = YELLOW
HIGHLIGHT_NAME = "overlap_phys"

MOTHER = "mother"
SISTER = "sister"


@dataclass(frozen=True, eq=False)
class OverlapRecord:
    """One confirmed overlap of ``placement`` with its mother or a sister.

    ``point`` is the sample location in the mother's frame and
    ``distance`` the penetration depth found there.
    """

    placement: Placement
    region: Solid
    kind: str
    partner: str
    point: Tuple[float, float, float]
    distance: float


class OverlapRegistry:
    """Append-only collection of overlap records from one check."""

    def __init__(self) -> None:
        self._records: List[OverlapRecord] = []

    def add(self, record: OverlapRecord) -> None:
        self._records.append(record)

    def __iter__(self) -> Iterator[OverlapRecord]:
        return iter(list(self._records))

    def __len__(self) -> int:
        return len(self._records)

    def __bool__(self) -> bool:
        return bool(self._records)

    def for_placement(self, placement: Placement) -> List[OverlapRecord]:
        return [rec for rec in self._records if rec.placement is placement]

    def placements(self) -> List[Placement]:
        """offending placements, in the order they were first recorded"""
        seen: List[Placement] = []
        for rec in self._records:
            if not any(rec.placement is p for p in seen):
                seen.append(rec.placement)
        return seen

    def clear(self) -> None:
        self._records.clear()


@dataclass(frozen=True)
class _CheckParams:
    resolution: int
    tolerance: float
    verbose: bool
    errmax: int
    rng: Any


def detect_overlaps(placement: Placement,
                    registry: OverlapRegistry,
                    resolution: int = 1000,
                    tolerance: float = 0.0,
                    verbose: bool = True,
                    errmax: int = 1,
                    rng=None,
                    mother: Optional[Placement] = None) -> None:
    """Check ``placement`` and its whole subtree for overlaps.

    ``resolution`` surface points are drawn per placement.  Checking of a
    placement stops once it has ``errmax`` confirmed overlaps, so the
    registry never holds more than ``errmax`` records per placement.
    Placements with at least one overlap are flagged in red.  Children
    are always visited, whether or not their mother overlaps.

    Pass ``mother`` to check a subtree whose root is itself a daughter;
    otherwise ``placement`` is treated as the world and only its
    descendants are checked.
    """

    if isinstance(resolution, bool) or not isinstance(resolution, int) or resolution < 1:
        raise ConfigurationError(f"resolution must be a positive integer, got {resolution!r}")
    if isinstance(errmax, bool) or not isinstance(errmax, int) or errmax < 1:
        raise ConfigurationError(f"errmax must be a positive integer, got {errmax!r}")
    if tolerance is None or tolerance < 0.0:
        raise ConfigurationError(f"tolerance must be non-negative, got {tolerance!r}")

    params = _CheckParams(resolution, float(tolerance), bool(verbose), errmax, rng)
    _check_tree(placement, mother, registry, params)


def _check_tree(placement: Placement, mother: Optional[Placement],
                registry: OverlapRegistry, params: _CheckParams) -> None:
    if placement.highlight:
        return
    if mother is not None:
        _check_placement(placement, mother, registry, params)
    for child in list(placement.children):
        _check_tree(child, placement, registry, params)


def _inverse(placement: Placement) -> Matrix:
    try:
        return placement.xform.inverse()
    except ValueError as exc:
        raise ConfigurationError(f"placement '{placement.name}' has a singular transform") from exc


def _check_placement(placement: Placement, mother: Placement,
                     registry: OverlapRegistry, params: _CheckParams) -> int:
    solid = placement.solid
    mother_solid = mother.solid
    tm = placement.xform
    tm_inv = _inverse(placement)
    sisters = [(d, _inverse(d)) for d in mother.children
               if d is not placement and not d.highlight]
    logger.debug("checking %s in %s against %d sister(s)",
                 placement.name, mother.name, len(sisters))

    trials = 0
    for _ in range(params.resolution):
        p = solid.point_on_surface(params.rng)
        mp = tm.transform_point(p)

        if mother_solid.inside(mp) is EInside.OUTSIDE:
            distin = mother_solid.distance_to_in(mp)
            if distin > params.tolerance:
                trials += 1
                _record(registry, placement, MOTHER, mother.name, mp, distin, params,
                        lambda: _inflate(subtract(solid, mother_solid, tm_inv), params.rng))
                if trials >= params.errmax:
                    break

        for sister, td_inv in sisters:
            md = td_inv.transform_point(mp)
            sister_solid = sister.solid
            if sister_solid.inside(md) is not EInside.INSIDE:
                continue
            distout = sister_solid.distance_to_out(md)
            if distout > params.tolerance:
                trials += 1
                relative = tm_inv.compose(sister.xform)
                _record(registry, placement, SISTER, sister.name, mp, distout, params,
                        lambda: _inflate(intersect(solid, sister_solid, relative), params.rng))
                if trials >= params.errmax:
                    break
        if trials >= params.errmax:
            break

    if trials:
        placement.vis.colour = FLAG_COLOUR
    return trials


def _inflate(region: Solid, rng) -> Solid:
    # the boundary centroid of a convex region lies inside it
    return scale(region, REGION_SCALE, center=surface_centroid(region, rng),
                 name="overlap_scaled_solid")


def _record(registry: OverlapRegistry, placement: Placement, kind: str, partner: str,
            where, distance: float, params: _CheckParams,
            make_region: Callable[[], Solid]) -> None:
    if params.verbose:
        logger.info("Overlap of %s with %s %s at (%g, %g, %g) (%g mm)",
                    placement.name, kind, partner, where[0], where[1], where[2], distance)
    try:
        region = make_region()
    except SolidError as exc:
        logger.warning("could not build overlap region of %s with %s %s: %s",
                       placement.name, kind, partner, exc)
        return
    registry.add(OverlapRecord(placement, region, kind, partner,
                               (where[0], where[1], where[2]), distance))


def draw_overlaps(registry: OverlapRegistry) -> List[Placement]:
    """Attach every overlap region as a highlighted daughter of its
    offending placement.  Call after :func:`detect_overlaps` has returned."""

    created = []
    for record in registry:
        highlight = Placement(HIGHLIGHT_NAME, record.region, Matrix(),
                              vis=VisAttributes(HIGHLIGHT_COLOUR), highlight=True)
        record.placement.add_child(highlight)
        created.append(highlight)
    logger.debug("attached %d overlap highlight(s)", len(created))
    return created


__all__ = [
    "REGION_SCALE",
    "FLAG_COLOUR",
    "HIGHLIGHT_COLOUR",
    "HIGHLIGHT_NAME",
    "MOTHER",
    "SISTER",
    "OverlapRecord",
    "OverlapRegistry",
    "detect_overlaps",
    "draw_overlaps",
]
