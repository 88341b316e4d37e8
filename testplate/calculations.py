"""
Optical calculations for testplate analysis.
Closed-form sag and radius formulas; no state, no I/O.
"""

from typing import Any, Dict, List

import numpy as np

CONVEX = "Convex"
CONCAVE = "Concave"

_NM_PER_MM = 1_000_000.0


def testplate_sag(radius: float, diameter: float) -> float:
    """
    Sag of the testplate over the surface aperture: z = |R| - sqrt(R² - (D/2)²).

    Args:
        radius: Testplate radius in mm (sign is ignored)
        diameter: Surface diameter in mm

    Returns:
        Sag in mm, or 0 when radius or diameter is 0, or when the diameter
        exceeds the aperture the radius allows.
    """
    if radius == 0 or diameter == 0:
        return 0.0
    r2 = radius * radius
    d2 = (diameter / 2) * (diameter / 2)
    if r2 < d2:
        return 0.0
    return float(np.abs(radius) - np.sqrt(r2 - d2))


def fringe_sag(fringes: float, wavelength_nm: float) -> float:
    """
    Sag contribution of N fringes: dz = N * lambda / 2, lambda converted nm -> mm.
    Negative fringe counts give negative contributions.
    """
    lambda_mm = wavelength_nm / _NM_PER_MM
    return float(fringes * lambda_mm / 2)


def actual_sag(surface_type: str, testplate_sag_mm: float, fringe_sag_mm: float) -> float:
    """Convex: z_testplate + dz. Concave: z_testplate - dz."""
    if surface_type == CONVEX:
        return testplate_sag_mm + fringe_sag_mm
    return testplate_sag_mm - fringe_sag_mm


def actual_radius(surface_type: str, diameter: float, sag: float) -> float:
    """
    Radius from sag: R = (D²/4 + z²) / (2z).

    Args:
        surface_type: 'Convex' or 'Concave'
        diameter: Surface diameter in mm
        sag: Surface sag in mm

    Returns:
        Radius in mm. Sign is set by surface type, not by the sign of the sag:
        Concave -> negative, anything else -> positive. 0 when sag or diameter is 0.
    """
    if sag == 0 or diameter == 0:
        return 0.0
    d2 = diameter * diameter / 4
    z2 = sag * sag
    radius = float(np.abs((d2 + z2) / (2 * sag)))
    if surface_type == CONCAVE:
        return -radius
    return radius


def calculate_surface(
    surface_type: str,
    diameter: float,
    r_testplate: float,
    fringes: float,
    wavelength_nm: float,
) -> Dict[str, float]:
    """
    Run the full chain testplate sag -> fringe sag -> actual sag -> actual radius.
    Returns {sagTestplate, sagAdded, sagActual, rActual}.
    """
    sag_testplate = testplate_sag(r_testplate, diameter)
    sag_added = fringe_sag(fringes, wavelength_nm)
    sag_actual = actual_sag(surface_type, sag_testplate, sag_added)
    r_actual = actual_radius(surface_type, diameter, sag_actual)
    return {
        "sagTestplate": sag_testplate,
        "sagAdded": sag_added,
        "sagActual": sag_actual,
        "rActual": r_actual,
    }


def radius_to_curvature(radius: float) -> float:
    """Curvature (1/mm) from radius (mm). 0 -> 0 (flat)."""
    if radius == 0:
        return 0.0
    return 1.0 / radius


def curvature_to_radius(curvature: float) -> float:
    """Radius (mm) from curvature (1/mm). 0 -> 0 (flat)."""
    if curvature == 0:
        return 0.0
    return 1.0 / curvature


def validate_inputs(diameter: float, radius: float) -> Dict[str, Any]:
    """
    Advisory geometry check for a table row. Not used by the calculation functions,
    which return sentinel zeros for invalid geometry instead.
    """
    errors: List[str] = []
    if diameter <= 0:
        errors.append("Diameter must be positive")
    if abs(radius) < diameter / 2:
        errors.append("Radius is too small for the given diameter")
    return {"valid": not errors, "errors": errors}
