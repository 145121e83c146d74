"""Command-line entry point: view a scene and check it for overlaps."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Sequence

from volcheck.config import DEFAULT_ERRMAX, DEFAULT_RESOLUTION, DEFAULT_TOLERANCE, ViewerConfig
from volcheck.construct import construct
from volcheck.errors import VolcheckError
from volcheck.io.report import write_report
from volcheck.logging_config import setup_logging
from volcheck.mesh import DEFAULT_SECTIONS
from volcheck.transparency import DEFAULT_ALPHA
from volcheck.viewer import VIEWS, build_scene, export_scene, show_scene

logger = logging.getLogger("volcheck.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="volcheck",
        description="View a hierarchical solid-geometry scene and check it for overlaps.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("scene", help="top level scene file (YAML or JSON)")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable verbose messages")
    parser.add_argument("-s", "--schema", action="store_true", help="enable schema validation")
    parser.add_argument("-c", "--usecwd", action="store_true", help="use include paths relative to cwd")
    parser.add_argument("-o", "--overlap", action="store_true", help="enable overlap check")
    parser.add_argument("-t", "--tolerance", type=float, default=DEFAULT_TOLERANCE,
                        help="overlap tolerance in mm")
    parser.add_argument("-r", "--resolution", type=int, default=DEFAULT_RESOLUTION,
                        help="surface points sampled per volume")
    parser.add_argument("-e", "--errmax", type=int, default=DEFAULT_ERRMAX,
                        help="overlaps reported per volume before moving on")
    parser.add_argument("--transparency", type=float, default=DEFAULT_ALPHA,
                        help="opacity factor applied per nesting level")
    parser.add_argument("--sections", type=int, default=DEFAULT_SECTIONS,
                        help="segments per circle when tessellating round solids")
    parser.add_argument("--seed", type=int, default=None, help="random seed for surface sampling")
    parser.add_argument("--export", default=None, help="write the scene to this mesh file (e.g. scene.glb)")
    parser.add_argument("--report", default=None, help="write the overlap report to this JSON file")
    parser.add_argument("--view", choices=sorted(VIEWS), default=None, help="initial camera view")
    parser.add_argument("--no-show", action="store_true", help="do not open the interactive viewer")
    parser.add_argument("--log-file", default=None, help="also write log messages to this file")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(verbose=args.verbose, log_file=args.log_file)

    try:
        config = ViewerConfig.from_args(args).check()
        result = construct(config)
    except VolcheckError as exc:
        logger.error("%s", exc)
        return 1

    if config.report:
        path = write_report(result.registry, config.report)
        logger.info("overlap report written to %s", path)

    if config.export or config.show:
        scene = build_scene(result.world, config.sections)
        if config.export:
            export_scene(scene, config.export)
        if config.show:
            try:
                show_scene(scene, view=config.view)
            except ImportError as exc:
                logger.error("cannot open viewer (%s); install volcheck[viewer] or use --no-show", exc)
                return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
