"""Pytest configuration and shared fixtures (.zmx prescription samples)."""
import logging
import os
import sys

import pytest

# Ensure project root is on PYTHONPATH for testplate and parsing imports
_project_root = os.path.dirname(os.path.abspath(__file__))
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)


def pytest_configure(config):
    """Log at INFO, with testplate's dropped-row/surface messages at DEBUG."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )
    logging.getLogger("testplate").setLevel(logging.DEBUG)


def _zmx_surface(curv, semi_diameter, glas=None):
    """One SURF block body (without the SURF line) in .zmx layout."""
    lines = [
        "  TYPE STANDARD",
        f'  CURV {curv} 0 0 0 0 ""',
        f'  DIAM {semi_diameter} 1 0 0 1 ""',
        "  DISZ 5",
    ]
    if glas:
        lines.insert(2, f"  GLAS {glas}")
    return lines


def _build_zmx(blocks):
    """Build .zmx text from a list of SURF block bodies, numbered from 0."""
    out = ["VERS 190513 80 123457 L123457", "MODE SEQ", "NAME Test lens", "UNIT MM X W X CM MR CPMM"]
    for i, body in enumerate(blocks):
        out.append(f"SURF {i}")
        out.extend(body)
    return "\n".join(out) + "\n"


@pytest.fixture
def zmx_surface():
    return _zmx_surface


@pytest.fixture
def build_zmx():
    return _build_zmx


@pytest.fixture
def singlet_zmx():
    """Object, N-BK7 singlet (R1=+50, R2=-50, semi-diameter 12.7), image."""
    return _build_zmx([
        _zmx_surface("0.0", "0"),
        _zmx_surface("2.0E-2", "12.7", glas="N-BK7 1 0 1.5168 64.17 0 0 0 0 0 0"),
        _zmx_surface("-2.0E-2", "12.7"),
        _zmx_surface("0.0", "3.1"),
    ])
