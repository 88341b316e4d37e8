"""
Table service: applies the surface calculation to a table of surfaces sharing one
wavelength, producing the persisted surface records and summary statistics.
"""

import logging
from typing import Any, Dict, List, Optional

import numpy as np

from parsing import (
    parse_diameter,
    parse_fringes,
    parse_radius,
    parse_surface_type,
    parse_wavelength,
)
from testplate.calculations import calculate_surface, validate_inputs

logger = logging.getLogger(__name__)


def calculate_row(surface: Dict[str, Any], wavelength: float) -> Dict[str, Any]:
    """
    Calculate one table row. Cells may be numbers or user-entered strings;
    an empty fringe cell counts as 0 fringes. Raises ValueError on non-numeric cells.
    """
    surf_type = parse_surface_type(surface.get("type"))
    diameter = parse_diameter(surface.get("diameter")) or 0.0
    r_testplate = parse_radius(surface.get("rTestplate"))
    fringes = parse_fringes(surface.get("fringes"))

    result = calculate_surface(surf_type, diameter, r_testplate, fringes, wavelength)
    return {
        "type": surf_type,
        "material": surface.get("material") or "",
        "diameter": diameter,
        "rTestplate": r_testplate,
        "sagTestplate": result["sagTestplate"],
        "fringes": fringes,
        "sagAdded": result["sagAdded"],
        "rActual": result["rActual"],
        "sagActual": result["sagActual"],
    }


def _failed_row(index: int, surface: Dict[str, Any], error: str) -> Dict[str, Any]:
    """Row that could not be calculated: cells echoed back, results empty."""
    return {
        "index": index,
        "type": surface.get("type"),
        "material": surface.get("material") or "",
        "diameter": surface.get("diameter"),
        "rTestplate": surface.get("rTestplate"),
        "sagTestplate": None,
        "fringes": surface.get("fringes"),
        "sagAdded": None,
        "rActual": None,
        "sagActual": None,
        "error": error,
    }


def calculate_table(surfaces: List[Dict[str, Any]], wavelength: Any = None) -> List[Dict[str, Any]]:
    """
    Calculate every row with the table's single wavelength (nm; empty -> default).
    One output row per input row, in order, each carrying its input `index`.
    Rows with unreadable cells get an `error` message and no results.
    """
    wvl = parse_wavelength(wavelength)
    rows: List[Dict[str, Any]] = []
    for i, surface in enumerate(surfaces):
        try:
            row = calculate_row(surface, wvl)
        except (TypeError, ValueError) as e:
            logger.warning("Surface %d not calculated: %s", i + 1, e)
            rows.append(_failed_row(i, surface, f"Surface {i + 1}: {e}"))
            continue
        row["index"] = i
        rows.append(row)
    return rows


def validate_table(surfaces: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Advisory validation per row, in table order. Rows that failed to calculate are invalid."""
    out: List[Dict[str, Any]] = []
    for surface in surfaces:
        if surface.get("error"):
            out.append({"valid": False, "errors": [surface["error"]]})
            continue
        diameter = float(surface.get("diameter") or 0.0)
        radius = float(surface.get("rTestplate") or 0.0)
        out.append(validate_inputs(diameter, radius))
    return out


def generate_stats(surfaces: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Count and mean/min/max of actual radius over calculated rows. None if there are none."""
    calculated = [s for s in surfaces if not s.get("error")]
    if not calculated:
        return None
    radii = np.array([float(s["rActual"]) for s in calculated])
    return {
        "count": len(calculated),
        "avgRadius": float(np.mean(radii)),
        "minRadius": float(np.min(radii)),
        "maxRadius": float(np.max(radii)),
    }
