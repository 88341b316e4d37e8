#!/usr/bin/env python3
"""
Parsing utilities for surface table cells. Extracted for testability.
"""

DEFAULT_WAVELENGTH_NM = 550.0


def parse_fringes(s):
    """Parse fringe count. Empty (not yet measured) -> 0."""
    s = "" if s is None else str(s).strip()
    if not s:
        return 0.0
    return float(s)


def parse_wavelength(s):
    """Parse wavelength (nm). Default 550.0."""
    s = "" if s is None else str(s).strip()
    if not s:
        return DEFAULT_WAVELENGTH_NM
    return float(s)


def parse_diameter(s):
    """Parse diameter (mm). None if empty."""
    s = "" if s is None else str(s).strip()
    if not s:
        return None
    return float(s)


def parse_radius(s):
    """Parse testplate radius (mm). Empty -> 0 (flat)."""
    s = "" if s is None else str(s).strip()
    if not s:
        return 0.0
    return float(s)


def parse_surface_type(s):
    """Normalize surface type label. Anything but 'concave' is treated as Convex."""
    s = "" if s is None else str(s).strip()
    if s.lower() == "concave":
        return "Concave"
    return "Convex"
