"""API tests for the FastAPI application."""

import pytest
from fastapi.testclient import TestClient

from testplate.main import app


@pytest.fixture
def client():
    return TestClient(app)


class TestCalculateEndpoint:
    """POST /api/calculate."""

    def test_convex(self, client):
        resp = client.post("/api/calculate", json={
            "type": "Convex", "diameter": 30.0, "rTestplate": 33.0, "fringes": 5, "wavelength": 632.8,
        })
        assert resp.status_code == 200
        body = resp.json()
        assert body["sagAdded"] == pytest.approx(0.001582)
        assert body["rActual"] > 0

    def test_invalid_geometry_is_not_an_error(self, client):
        resp = client.post("/api/calculate", json={"type": "Concave", "diameter": 50.0, "rTestplate": 10.0})
        assert resp.status_code == 200
        assert resp.json()["rActual"] == 0.0

    def test_missing_field_is_422(self, client):
        resp = client.post("/api/calculate", json={"type": "Convex", "diameter": 30.0})
        assert resp.status_code == 422


class TestValidateEndpoint:
    """POST /api/validate."""

    def test_invalid(self, client):
        resp = client.post("/api/validate", json={"diameter": 30.0, "radius": 10.0})
        assert resp.status_code == 200
        assert resp.json() == {"valid": False, "errors": ["Radius is too small for the given diameter"]}


class TestTableEndpoint:
    """POST /api/calculate/table."""

    def test_table(self, client):
        resp = client.post("/api/calculate/table", json={
            "wavelength": 632.8,
            "surfaces": [
                {"type": "Convex", "material": "N-BK7", "diameter": 25.4, "rTestplate": 50.0, "fringes": 3},
                {"type": "Concave", "diameter": 25.4, "rTestplate": 50.0, "fringes": ""},
            ],
        })
        assert resp.status_code == 200
        body = resp.json()
        assert body["wavelength"] == 632.8
        assert len(body["surfaces"]) == 2
        assert body["surfaces"][1]["rActual"] == pytest.approx(-50.0, rel=1e-9)
        assert body["validation"] == [{"valid": True, "errors": []}] * 2
        assert body["stats"]["count"] == 2

    def test_unreadable_row_reported_in_place(self, client):
        resp = client.post("/api/calculate/table", json={
            "wavelength": 632.8,
            "surfaces": [
                {"type": "Convex", "diameter": 25.4, "rTestplate": 50.0, "fringes": "n/a"},
                {"type": "Concave", "diameter": 25.4, "rTestplate": 50.0, "fringes": 1},
            ],
        })
        assert resp.status_code == 200
        body = resp.json()
        assert len(body["surfaces"]) == 2
        assert len(body["validation"]) == 2
        first, second = body["surfaces"]
        assert first["index"] == 0
        assert "Surface 1" in first["error"]
        assert first["rActual"] is None
        assert second["index"] == 1
        assert second["type"] == "Concave"
        assert "error" not in second
        assert body["validation"][0]["valid"] is False
        assert body["validation"][1]["valid"] is True
        assert body["stats"]["count"] == 1

    def test_empty_table(self, client):
        resp = client.post("/api/calculate/table", json={"surfaces": []})
        assert resp.status_code == 200
        assert resp.json()["stats"] is None


class TestImportEndpoint:
    """POST /api/import/prescription."""

    def test_text_upload(self, client):
        resp = client.post(
            "/api/import/prescription",
            files={"file": ("lens.txt", b"S1 -50.0 25.4\nS2 40 20\n", "text/plain")},
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["format"] == "plain"
        assert [s["type"] for s in body["surfaces"]] == ["Convex", "Concave"]

    def test_zmx_upload(self, client, singlet_zmx):
        resp = client.post(
            "/api/import/prescription",
            files={"file": ("singlet.zmx", singlet_zmx.encode("utf-8"), "application/octet-stream")},
        )
        assert resp.status_code == 200
        assert resp.json()["surfaces"][0]["material"] == "N-BK7"

    def test_csv_explicit_format(self, client):
        resp = client.post(
            "/api/import/prescription?format=csv",
            files={"file": ("lens.dat", b"r,d\n50,25.4\n", "text/plain")},
        )
        assert resp.status_code == 200
        assert len(resp.json()["surfaces"]) == 1

    def test_overflowing_value_row_dropped(self, client):
        resp = client.post(
            "/api/import/prescription",
            files={"file": ("lens.txt", b"S1 50 1e400\nS2 40 20\n", "text/plain")},
        )
        assert resp.status_code == 200
        surfaces = resp.json()["surfaces"]
        assert len(surfaces) == 1
        assert surfaces[0]["diameter"] == 20.0

    def test_empty_upload_is_400(self, client):
        resp = client.post("/api/import/prescription", files={"file": ("lens.zmx", b"", "text/plain")})
        assert resp.status_code == 400

    def test_nothing_importable_is_400(self, client):
        resp = client.post("/api/import/prescription", files={"file": ("notes.txt", b"hello\n", "text/plain")})
        assert resp.status_code == 400
        assert "No surfaces found" in resp.json()["detail"]


class TestConvertEndpoints:
    """GET /api/convert/*."""

    def test_curvature(self, client):
        assert client.get("/api/convert/curvature", params={"radius": 50}).json()["curvature"] == pytest.approx(0.02)
        assert client.get("/api/convert/curvature", params={"radius": 0}).json()["curvature"] == 0.0

    def test_radius(self, client):
        assert client.get("/api/convert/radius", params={"curvature": -0.02}).json()["radius"] == pytest.approx(-50.0)
