"""Scene loading and report writing for volcheck."""

from .report import registry_to_dict, write_report
from .scene import load_document, load_scene
from .schema import validate_document

__all__ = [
    "load_document",
    "load_scene",
    "validate_document",
    "registry_to_dict",
    "write_report",
]
