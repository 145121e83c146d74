"""Run configuration for loading, checking and viewing a scene."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from volcheck.errors import ConfigurationError
from volcheck.mesh import DEFAULT_SECTIONS
from volcheck.transparency import DEFAULT_ALPHA

DEFAULT_RESOLUTION = 1000
DEFAULT_TOLERANCE = 0.0
DEFAULT_ERRMAX = 1


@dataclass
class ViewerConfig:
    """Knobs of one volcheck run.

    ``tolerance`` is in mm.  ``usecwd`` resolves include files relative
    to the current directory instead of the scene file's directory.
    ``sections`` is the number of segments per full circle used when
    round solids are tessellated for display.
    """

    scene: Path
    validate: bool = False
    usecwd: bool = False
    overlap: bool = False
    resolution: int = DEFAULT_RESOLUTION
    tolerance: float = DEFAULT_TOLERANCE
    verbose: bool = False
    errmax: int = DEFAULT_ERRMAX
    transparency: float = DEFAULT_ALPHA
    sections: int = DEFAULT_SECTIONS
    seed: Optional[int] = None
    export: Optional[Path] = None
    report: Optional[Path] = None
    view: Optional[str] = None
    show: bool = True

    def check(self) -> "ViewerConfig":
        """Raise :class:`ConfigurationError` for out-of-range values."""
        if self.resolution < 1:
            raise ConfigurationError(f"resolution must be a positive integer, got {self.resolution}")
        if self.errmax < 1:
            raise ConfigurationError(f"errmax must be a positive integer, got {self.errmax}")
        if self.tolerance < 0.0:
            raise ConfigurationError(f"tolerance must be non-negative, got {self.tolerance}")
        if not 0.0 < self.transparency <= 1.0:
            raise ConfigurationError(f"transparency must be in (0, 1], got {self.transparency}")
        if self.sections < 3:
            raise ConfigurationError(f"sections must be at least 3, got {self.sections}")
        if not self.scene.exists():
            raise ConfigurationError(f"scene file not found: {self.scene}")
        return self

    @classmethod
    def from_args(cls, args: Any) -> "ViewerConfig":
        return cls(
            scene=Path(args.scene),
            validate=args.schema,
            usecwd=args.usecwd,
            overlap=args.overlap,
            resolution=args.resolution,
            tolerance=args.tolerance,
            verbose=args.verbose,
            errmax=args.errmax,
            transparency=args.transparency,
            sections=args.sections,
            seed=args.seed,
            export=Path(args.export) if args.export else None,
            report=Path(args.report) if args.report else None,
            view=args.view,
            show=not args.no_show,
        )


__all__ = ["DEFAULT_RESOLUTION", "DEFAULT_TOLERANCE", "DEFAULT_ERRMAX", "ViewerConfig"]
