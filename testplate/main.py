"""
FastAPI backend for testplate analysis.
Calculates actual radius/sag from testplate fringe measurements and imports
surface prescriptions from .zmx, text, and CSV files.
"""

from typing import Any, Dict, List, Optional, Union

from fastapi import FastAPI, File, HTTPException, Query, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from parsing import DEFAULT_WAVELENGTH_NM
from testplate.calculations import (
    calculate_surface,
    curvature_to_radius,
    radius_to_curvature,
    validate_inputs,
)
from testplate.table_service import calculate_table, generate_stats, validate_table

ALLOWED_ORIGINS = ["http://localhost:5173", "http://127.0.0.1:5173"]

app = FastAPI(title="Testplate Analysis API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class SurfaceMeasurement(BaseModel):
    """One surface to calculate. type: 'Convex' | 'Concave'."""
    type: str
    diameter: float
    rTestplate: float
    fringes: float = 0.0
    wavelength: float = DEFAULT_WAVELENGTH_NM


class SurfaceResult(BaseModel):
    """Derived geometry for one surface (mm)."""
    sagTestplate: float
    sagAdded: float
    sagActual: float
    rActual: float


class ValidationRequest(BaseModel):
    diameter: float
    radius: float


class ValidationResult(BaseModel):
    valid: bool
    errors: List[str]


class TableSurface(BaseModel):
    """Table row as edited in the frontend; fringes may still be the empty placeholder."""
    type: str = "Convex"
    material: Optional[str] = ""
    diameter: float
    rTestplate: float
    fringes: Union[float, str] = ""


class TableRequest(BaseModel):
    """A surface table: one shared wavelength (nm) for all rows."""
    wavelength: float = DEFAULT_WAVELENGTH_NM
    surfaces: List[TableSurface]


@app.post("/api/calculate", response_model=SurfaceResult)
def calculate(req: SurfaceMeasurement):
    """
    Calculate testplate sag, fringe sag, actual sag and actual radius for one surface.
    Invalid geometry yields zeros, not an error; use /api/validate to check inputs.
    """
    return calculate_surface(req.type, req.diameter, req.rTestplate, req.fringes, req.wavelength)


@app.post("/api/validate", response_model=ValidationResult)
def validate(req: ValidationRequest):
    """Advisory check: diameter > 0 and |radius| >= diameter / 2."""
    return validate_inputs(req.diameter, req.radius)


@app.post("/api/calculate/table")
def calculate_surface_table(req: TableRequest) -> Dict[str, Any]:
    """
    Calculate every row of a surface table.
    Returns { wavelength, surfaces, validation, stats }; surfaces and validation have one
    entry per request row, and a row that could not be calculated carries an error.
    """
    rows = calculate_table([s.model_dump() for s in req.surfaces], req.wavelength)
    return {
        "wavelength": req.wavelength,
        "surfaces": rows,
        "validation": validate_table(rows),
        "stats": generate_stats(rows),
    }


@app.post("/api/import/prescription")
async def import_prescription(
    file: UploadFile = File(...),
    fmt: Optional[str] = Query(None, alias="format", description="structured | plain | delimited (default: auto)"),
):
    """
    Import surfaces from a .zmx, text, or CSV prescription file.
    Returns { format, surfaces } with fringes left empty for the user to fill in.
    """
    from testplate.prescription_importer import import_prescription as do_import

    content = await file.read()
    if not content:
        raise HTTPException(status_code=400, detail="Empty file")
    try:
        return do_import(content, file.filename or "", fmt)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.get("/api/convert/curvature")
def to_curvature(radius: float):
    """Curvature (1/mm) for a radius (mm); 0 -> 0."""
    return {"radius": radius, "curvature": radius_to_curvature(radius)}


@app.get("/api/convert/radius")
def to_radius(curvature: float):
    """Radius (mm) for a curvature (1/mm); 0 -> 0."""
    return {"curvature": curvature, "radius": curvature_to_radius(curvature)}
