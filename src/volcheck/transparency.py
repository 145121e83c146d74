"""Depth-based display transparency for placement trees."""

from __future__ import annotations

from volcheck.placement import Placement

DEFAULT_ALPHA = 0.75


def add_transparency(placement: Placement, alpha: float = DEFAULT_ALPHA) -> float:
    """Assign display opacity to every placement below ``placement``.

    A node's opacity is the minimum of the values returned by its
    children (1.0 for a leaf); the value handed back to the caller is
    that opacity times ``alpha``.  Containers therefore fade by one more
    factor of ``alpha`` per level of nesting below them, so the
    innermost volumes stay visible through their mothers.
    """

    a = 1.0
    for child in placement.children:
        a = min(a, add_transparency(child, alpha))
    placement.vis.colour = (1.0, 1.0, 1.0, a)
    return a * alpha


__all__ = ["DEFAULT_ALPHA", "add_transparency"]
