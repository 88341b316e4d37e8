"""
Surface prescription parser: Zemax .zmx, plain whitespace text, and CSV.
Maps each file to a list of raw surface records {type, diameter, rTestplate, material, fringes}.

Strategies never raise on bad data: a surface or line that cannot be read is dropped,
and an empty list is the only failure signal.
"""

import logging
import math
import re
from typing import Callable, Dict, Iterable, List, NamedTuple, Optional

from testplate.calculations import CONCAVE, CONVEX, curvature_to_radius

logger = logging.getLogger(__name__)

FORMAT_STRUCTURED = "structured"
FORMAT_DELIMITED = "delimited"
FORMAT_PLAIN = "plain"

BLANK_GLASS = "___BLANK"
_COMMENT_PREFIXES = ("#", "//")

_NUMBER_RE = re.compile(r"[-+]?[0-9]*\.?[0-9]+([eE][-+]?[0-9]+)?")
# Leading numeric prefix of a token: "25.4mm" -> 25.4, "abc" -> no match
_LEADING_NUMBER_RE = re.compile(r"\s*([-+]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][-+]?[0-9]+)?)")
_UNDERSCORES_RE = re.compile(r"^_+$")

# (has material, radius > 0) -> surface type. A bare surface mirrors the glass-backed convention.
_SURFACE_TYPE_TABLE: Dict[tuple, str] = {
    (True, True): CONVEX,
    (True, False): CONCAVE,
    (False, True): CONCAVE,
    (False, False): CONVEX,
}

Strategy = Callable[[str], List[Dict]]


class _SurfaceBlock(NamedTuple):
    """Data accumulated for one SURF block of a .zmx file."""
    index: int
    radius: float = 0.0
    diameter: float = 0.0
    material: Optional[str] = None

    def is_valid(self) -> bool:
        return _is_surface_geometry(self.radius, self.diameter)


def _is_surface_geometry(radius: Optional[float], diameter: Optional[float]) -> bool:
    """Finite non-zero radius and finite positive diameter."""
    if radius is None or diameter is None:
        return False
    if not (math.isfinite(radius) and math.isfinite(diameter)):
        return False
    return radius != 0 and diameter > 0


def _leading_float(token: str) -> Optional[float]:
    m = _LEADING_NUMBER_RE.match(token or "")
    if not m:
        return None
    return float(m.group(1))


def extract_number(line: str) -> Optional[float]:
    """First number in the line (sign, decimals and exponent allowed), or None."""
    m = _NUMBER_RE.search(line)
    if not m:
        return None
    return float(m.group(0))


def extract_material(line: str) -> Optional[str]:
    """
    Material from a GLAS line.
    'GLAS N-BK7 ...' -> 'N-BK7'; 'GLAS ___BLANK 1 0 1.5168 ...' -> 'n=1.5168'.
    """
    parts = line.strip().split()
    if len(parts) < 2:
        return None
    name = parts[1]
    if name != BLANK_GLASS and not _UNDERSCORES_RE.match(name):
        return name
    if name == BLANK_GLASS and len(parts) >= 5:
        index = _leading_float(parts[4])
        if index is not None and math.isfinite(index) and index > 1.0:
            return f"n={index:.4f}"
    return None


def determine_surface_type(radius: float, material: Optional[str]) -> str:
    """
    Surface type from radius sign and material presence.
    With material: R > 0 -> Convex, else Concave. Without material: reversed.
    """
    return _SURFACE_TYPE_TABLE[(bool(material), radius > 0)]


def format_surface(radius: float, diameter: float, material: Optional[str] = None) -> Dict:
    """Raw surface record for the table. Sign of radius is consumed by the type."""
    return {
        "type": determine_surface_type(radius, material),
        "diameter": abs(diameter),
        "rTestplate": abs(radius),
        "material": material or "",
        "fringes": "",
    }


def detect_format(content: str) -> str:
    """Sniff content: 'structured' (.zmx), 'delimited' (CSV), or 'plain' text."""
    if "SURF" in content and ("CURV" in content or "RADIUS" in content):
        return FORMAT_STRUCTURED
    if "," in content:
        return FORMAT_DELIMITED
    return FORMAT_PLAIN


def _apply_field(block: _SurfaceBlock, line: str) -> _SurfaceBlock:
    """Return the block updated with a CURV/DIAM/GLAS line (other lines leave it unchanged)."""
    if line.startswith("CURV "):
        curvature = extract_number(line)
        if curvature is not None and curvature != 0:
            return block._replace(radius=curvature_to_radius(curvature))
    elif line.startswith("DIAM "):
        semi_diameter = extract_number(line)
        if semi_diameter is not None and semi_diameter > 0:
            return block._replace(diameter=semi_diameter * 2)
    elif line.startswith("GLAS "):
        material = extract_material(line)
        if material:
            return block._replace(material=material)
    return block


def _emit(block: Optional[_SurfaceBlock], total: int) -> Optional[Dict]:
    if block is None:
        return None
    if block.index == 0 or block.index >= total - 1:
        logger.debug("SURF %d: object/image surface, skipped", block.index)
        return None
    if not block.is_valid():
        logger.debug("SURF %d: no radius or diameter (r=%s, d=%s), skipped",
                     block.index, block.radius, block.diameter)
        return None
    return format_surface(block.radius, block.diameter, block.material)


def parse_structured_format(content: str) -> List[Dict]:
    """
    Parse Zemax .zmx text: SURF blocks with CURV (1/R), DIAM (semi-diameter), GLAS.
    The first (object) and last (image) SURF are never returned, so the total SURF
    count is taken in a first pass.
    """
    lines = [ln.strip() for ln in content.splitlines()]
    total = sum(1 for ln in lines if ln.startswith("SURF "))

    surfaces: List[Dict] = []
    block: Optional[_SurfaceBlock] = None
    index = -1
    for line in lines:
        if line.startswith("SURF "):
            record = _emit(block, total)
            if record is not None:
                surfaces.append(record)
            index += 1
            block = _SurfaceBlock(index=index)
        elif block is not None:
            block = _apply_field(block, line)

    record = _emit(block, total)
    if record is not None:
        surfaces.append(record)
    return surfaces


def parse_text_format(content: str) -> List[Dict]:
    """
    Parse whitespace-separated lines 'Surface# Radius Diameter'.
    Blank lines and lines starting with '#' or '//' are ignored.
    """
    surfaces: List[Dict] = []
    for lineno, line in enumerate(content.splitlines(), start=1):
        trimmed = line.strip()
        if not trimmed or trimmed.startswith(_COMMENT_PREFIXES):
            continue
        parts = trimmed.split()
        if len(parts) < 3:
            continue
        radius = _leading_float(parts[1])
        diameter = _leading_float(parts[2])
        if not _is_surface_geometry(radius, diameter):
            logger.debug("Line %d: not a surface row: %r", lineno, trimmed)
            continue
        surfaces.append(format_surface(radius, diameter, None))
    return surfaces


def parse_csv(content: str) -> List[Dict]:
    """Parse CSV with a header row; columns are radius, diameter."""
    surfaces: List[Dict] = []
    for lineno, line in enumerate(content.splitlines()[1:], start=2):
        trimmed = line.strip()
        if not trimmed:
            continue
        parts = trimmed.split(",")
        if len(parts) < 2:
            continue
        radius = _leading_float(parts[0])
        diameter = _leading_float(parts[1])
        if not _is_surface_geometry(radius, diameter):
            logger.debug("CSV line %d: not a surface row: %r", lineno, trimmed)
            continue
        surfaces.append(format_surface(radius, diameter, None))
    return surfaces


STRATEGIES: Dict[str, Strategy] = {
    FORMAT_STRUCTURED: parse_structured_format,
    "zmx": parse_structured_format,
    FORMAT_PLAIN: parse_text_format,
    "text": parse_text_format,
    "txt": parse_text_format,
    FORMAT_DELIMITED: parse_csv,
    "csv": parse_csv,
}

# Automatic fallback chain. CSV is selected explicitly (format or .csv extension).
DEFAULT_CHAIN = (parse_structured_format, parse_text_format)


def first_nonempty(strategies: Iterable[Strategy], content: str) -> List[Dict]:
    """Result of the first strategy returning at least one surface, else []."""
    for strategy in strategies:
        surfaces = strategy(content)
        if surfaces:
            logger.debug("%s: %d surfaces", strategy.__name__, len(surfaces))
            return surfaces
    return []


def parse(content: str, fmt: Optional[str] = None) -> List[Dict]:
    """
    Parse prescription content. With no fmt, try .zmx then plain text.
    With fmt, run only that strategy. Unknown fmt -> ValueError.
    """
    if fmt is None:
        return first_nonempty(DEFAULT_CHAIN, content)
    strategy = STRATEGIES.get(fmt.strip().lower())
    if strategy is None:
        raise ValueError(
            f"Unknown prescription format '{fmt}'. Use one of: {', '.join(sorted(STRATEGIES))}."
        )
    return strategy(content)
