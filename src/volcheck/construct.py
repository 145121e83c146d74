"""Build a viewable world from a scene file: load, fade, check, highlight."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass

from volcheck.config import ViewerConfig
from volcheck.io.scene import load_scene
from volcheck.overlap import OverlapRegistry, detect_overlaps, draw_overlaps
from volcheck.placement import Placement, VisAttributes
from volcheck.transparency import add_transparency

logger = logging.getLogger(__name__)

WORLD_COLOUR = (1.0, 1.0, 1.0, 0.1)


@dataclass
class Construction:
    world: Placement
    registry: OverlapRegistry


def construct(config: ViewerConfig) -> Construction:
    """Load ``config.scene`` and prepare it for display.

    Every placement gets a depth-based opacity; with ``config.overlap``
    the tree is checked and overlap regions are attached as highlighted
    daughters.  The world itself is drawn faintly.
    """

    logger.info("Reading %s", config.scene)
    logger.info("- schema validation %s", "on" if config.validate else "off")
    logger.info("- overlap check %s", "on" if config.overlap else "off")

    world = load_scene(config.scene, validate=config.validate, usecwd=config.usecwd)
    add_transparency(world, config.transparency)

    registry = OverlapRegistry()
    if config.overlap:
        rng = random.Random(config.seed)
        detect_overlaps(world, registry,
                        resolution=config.resolution,
                        tolerance=config.tolerance,
                        verbose=config.verbose,
                        errmax=config.errmax,
                        rng=rng)
        draw_overlaps(registry)
        if registry:
            logger.warning("%d overlap(s) found in %d placement(s)",
                           len(registry), len(registry.placements()))
        else:
            logger.info("no overlaps found")

    world.vis = VisAttributes(WORLD_COLOUR, visible=True)
    return Construction(world, registry)


__all__ = ["WORLD_COLOUR", "Construction", "construct"]
