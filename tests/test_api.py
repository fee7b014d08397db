"""Basic API tests."""

import io
import os
import tempfile
import zipfile

import pytest
from fastapi.testclient import TestClient

from api.main import app
from api.routes.export import get_fetcher
from homemesh.config import ExportConfig
from homemesh.errors import ResourceNotFoundError
from homemesh.resources import ResourceFetcher


class MissingResourceFetcher(ResourceFetcher):
    """Fetcher for which every resource is missing."""

    async def fetch(self, path: str) -> bytes:
        raise ResourceNotFoundError(f"Resource not found: {path}")


async def missing_fetcher():
    yield MissingResourceFetcher()


@pytest.fixture
def client():
    """Create test client."""
    app.dependency_overrides[get_fetcher] = missing_fetcher
    yield TestClient(app)
    app.dependency_overrides.clear()


HOME = {
    "name": "flat",
    "walls": [{"x_start": 0, "y_start": 0, "x_end": 400, "y_end": 0, "left_color": "#C0C0C0"}],
    "rooms": [{"name": "Hall", "points": [[0, 0], [400, 0], [400, 300], [0, 300]]}],
    "furniture": [{"name": "Temperature sensor", "x": 100, "y": 100, "elevation": 150}],
}


def test_health_check(client):
    """Test health endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_packaging_health(client):
    response = client.get("/health/packaging")
    assert response.status_code == 200
    assert response.json()["zip_deflate_available"] is True


def test_root(client):
    """Test root endpoint."""
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "homemesh"
    assert data["status"] == "running"


def test_export_bundle(client):
    """Test OBJ bundle export."""
    response = client.post("/api/export", json={"home": HOME, "name": "my-flat"})
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/zip"
    assert 'filename="my-flat.zip"' in response.headers["content-disposition"]
    assert response.headers["x-export-faces"] == str(12 + 4 + 12)

    with zipfile.ZipFile(io.BytesIO(response.content)) as zf:
        assert sorted(zf.namelist()) == ["materials.mtl", "my-flat.obj"]
        mtl = zf.read("materials.mtl").decode()
    assert "newmtl color_192_192_192" in mtl


def test_export_uses_home_name(client):
    response = client.post("/api/export", json={"home": HOME})
    assert response.status_code == 200
    assert 'filename="flat.zip"' in response.headers["content-disposition"]


def test_export_empty_home(client):
    """An empty home is rejected with the exporter's message."""
    response = client.post("/api/export", json={"home": {}})
    assert response.status_code == 422
    assert "home is empty" in response.json()["detail"]


def test_export_invalid_color(client):
    home = {"walls": [{"x_end": 100, "left_color": "not-a-color"}]}
    response = client.post("/api/export", json={"home": home})
    assert response.status_code == 400


def test_export_rejects_path_in_name(client):
    response = client.post("/api/export", json={"home": HOME, "name": "../etc/passwd"})
    assert response.status_code == 422


def test_export_devices(client):
    """Test device-metadata sidecar."""
    response = client.post("/api/export/devices", json={"home": HOME})
    assert response.status_code == 200
    data = response.json()
    assert data["unitsystem"] == "meters"
    assert data["metadata"] == {"deviceCount": 1, "roomCount": 1, "wallCount": 1}
    device = data["devices"][0]
    assert device["type"] == "temperature_sensor"
    assert device["position"] == pytest.approx({"x": 1.0, "y": 1.5, "z": 1.0})


def test_export_does_not_read_files_outside_resource_root():
    """Texture paths cannot reach files outside the resource root."""
    with tempfile.TemporaryDirectory() as tmpdir:
        root = os.path.join(tmpdir, "resources")
        os.makedirs(root)
        secret = os.path.join(tmpdir, "secret.txt")
        with open(secret, "wb") as f:
            f.write(b"TOP-SECRET")

        room = {
            "name": "Hall",
            "points": [[0, 0], [400, 0], [400, 300], [0, 300]],
            "floor_texture": {"image": secret},
            "ceiling_texture": {"image": "../secret.txt"},
        }
        app.state.export_config = ExportConfig(resource_root=root)
        try:
            response = TestClient(app).post("/api/export", json={"home": {"rooms": [room]}})
        finally:
            app.state.export_config = None

    assert response.status_code == 200
    assert response.headers["x-export-textures"] == "0"
    with zipfile.ZipFile(io.BytesIO(response.content)) as zf:
        contents = [zf.read(name) for name in zf.namelist()]
    assert all(b"TOP-SECRET" not in data for data in contents)
