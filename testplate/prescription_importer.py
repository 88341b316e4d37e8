"""
PrescriptionImporter: import surface prescriptions from uploaded files (.zmx, .txt, .csv).
Decodes bytes, chooses the parse strategy, and reports files with nothing importable.
"""

import logging
from typing import Any, Dict, Optional

from testplate.prescription_parser import detect_format, parse

logger = logging.getLogger(__name__)


def decode_content(content: bytes) -> str:
    """Decode file bytes as UTF-8, falling back to Latin-1 for ANSI-encoded files."""
    try:
        return content.decode("utf-8")
    except UnicodeDecodeError:
        logger.info("Content is not valid UTF-8; decoding as Latin-1")
        return content.decode("latin-1")


def _format_for_filename(filename: str) -> Optional[str]:
    """CSV files go straight to the CSV strategy; everything else uses the automatic chain."""
    ext = (filename or "").lower().rsplit(".", 1)[-1] if "." in (filename or "") else ""
    if ext == "csv":
        return "csv"
    return None


def import_prescription(
    content: bytes,
    filename: str = "",
    fmt: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Import surfaces from file content.
    Returns {format, surfaces}: format is the sniffed format (hint only), surfaces the
    parsed raw surface records. Raises ValueError when the file is empty, fmt is
    unknown, or no surface could be read.
    """
    if not content:
        raise ValueError("Empty file")
    text = decode_content(content)
    detected = detect_format(text)
    chosen = fmt or _format_for_filename(filename)
    logger.info("Importing %r: detected=%s, strategy=%s", filename, detected, chosen or "auto")

    surfaces = parse(text, chosen)
    if not surfaces:
        raise ValueError(
            "No surfaces found. Expected Zemax SURF blocks with CURV/DIAM, "
            "'Surface Radius Diameter' lines, or CSV 'radius,diameter' rows."
        )
    logger.info("Imported %d surfaces from %r", len(surfaces), filename)
    return {"format": detected, "surfaces": surfaces}
