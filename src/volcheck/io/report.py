"""JSON report of overlap-check results."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

from volcheck.overlap import OverlapRegistry

SCHEMA_ID = "volcheck-overlap-report-v0.1"


def _float_vec(vec) -> List[float]:
    return [float(c) for c in vec[:3]]


def registry_to_dict(registry: OverlapRegistry) -> Dict[str, Any]:
    overlaps = []
    for rec in registry:
        lo, hi = rec.region.extent()
        overlaps.append({
            "placement": rec.placement.name,
            "copy": rec.placement.copy_no,
            "kind": rec.kind,
            "partner": rec.partner,
            "point": _float_vec(rec.point),
            "distance": float(rec.distance),
            "region": {
                "name": rec.region.name,
                "bbox": _float_vec(lo) + _float_vec(hi),
            },
        })
    return {
        "schema": SCHEMA_ID,
        "count": len(overlaps),
        "placements": sorted({item["placement"] for item in overlaps}),
        "overlaps": overlaps,
    }


def write_report(registry: OverlapRegistry, path: Path | str) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as fp:
        json.dump(registry_to_dict(registry), fp, indent=2)
    return path


__all__ = ["SCHEMA_ID", "registry_to_dict", "write_report"]
