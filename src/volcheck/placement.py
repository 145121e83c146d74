"""Placement tree: solids bound to transforms relative to their mother."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

from volcheck.solids import Solid
from volcheck.xform import Matrix

Colour = Tuple[float, float, float, float]

WHITE: Colour = (1.0, 1.0, 1.0, 1.0)
YELLOW: Colour = (1.0, 1.0, 0.0, 1.0)


@dataclass
class VisAttributes:
    """Display attributes of a placement."""

    colour: Colour = WHITE
    visible: bool = True

    @property
    def opacity(self) -> float:
        return self.colour[3]


@dataclass(eq=False)
class Placement:
    """A node of the placement tree.

    ``xform`` maps points from this placement's local frame into the
    frame of its mother.  Children are owned by this node, in order.
    ``highlight`` marks synthetic placements holding overlap regions.
    """

    name: str
    solid: Solid
    xform: Matrix = field(default_factory=Matrix)
    children: List["Placement"] = field(default_factory=list)
    vis: VisAttributes = field(default_factory=VisAttributes)
    highlight: bool = False
    copy_no: int = 0

    def __repr__(self) -> str:
        return f"Placement({self.name!r}, solid={self.solid.name!r}, children={len(self.children)})"

    def add_child(self, child: "Placement") -> "Placement":
        self.children.append(child)
        return child

    @property
    def opacity(self) -> float:
        return self.vis.opacity

    def walk(self) -> Iterator["Placement"]:
        """depth-first, pre-order traversal of this subtree"""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def depth(self) -> int:
        """number of levels below this node (0 for a leaf)"""
        if not self.children:
            return 0
        return 1 + max(child.depth() for child in self.children)

    def find(self, name: str) -> Optional["Placement"]:
        for node in self.walk():
            if node.name == name:
                return node
        return None


__all__ = ["Colour", "WHITE", "YELLOW", "VisAttributes", "Placement"]
