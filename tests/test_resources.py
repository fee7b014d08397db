# tests/test_resources.py
"""Tests for model reference resolution, fetching and archive reading."""

import io
import os
import tempfile
import zipfile

import pytest

from homemesh.config import ExportConfig
from homemesh.errors import ModelArchiveError, ResourceNotFoundError
from homemesh.home.elements import Furniture
from homemesh.resources import (
    HttpResourceFetcher,
    LocalResourceFetcher,
    ModelArchive,
    ModelResolver,
    create_fetcher,
)


def make_zip(entries: dict) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        for name, data in entries.items():
            zf.writestr(name, data)
    return buffer.getvalue()


class TestModelResolver:
    """Tests for the prioritized reference rules."""

    @pytest.mark.parametrize(
        "reference,archive,rule",
        [
            ("jar:file:/lib/catalog.jar!/furniture/chest.obj", "models/chest.zip", "archive_entry_mesh"),
            ("jar:file:/lib/catalog.jar!/chest.OBJ", "models/chest.zip", "archive_entry_mesh"),
            ("jar:http://host/catalog.jar!/models/sofa.zip", "models/sofa.zip", "archive_entry"),
            ("models/lamp.obj", "models/lamp.zip", "mesh_file"),
            ("http://host/lib/lamp.obj", "models/lamp.zip", "mesh_file"),
            ("custom/path/table.zip", "custom/path/table.zip", "pre_resolved"),
        ],
    )
    def test_reference_shapes(self, reference, archive, rule):
        request = ModelResolver("models").resolve_reference(reference)
        assert request.archive == archive
        assert request.rule == rule
        assert request.source == reference

    def test_models_dir_is_applied(self):
        resolver = ModelResolver("lib/resources/models/")
        assert resolver.resolve_reference("chest.obj").archive == "lib/resources/models/chest.zip"

    def test_archive_entry_is_relative_to_resource_root(self):
        resolver = ModelResolver("lib/resources/models")
        request = resolver.resolve_reference("jar:file:/lib/catalog.jar!/models/sofa.zip")
        assert request.archive == "models/sofa.zip"

    def test_catalog_id_fallback(self):
        piece = Furniture(catalog_id="eTeks#bed140x190")
        request = ModelResolver().resolve(piece)
        assert request.archive == "models/eTeks#bed140x190.zip"
        assert request.rule == "catalog_id"

    def test_explicit_reference_wins_over_catalog_id(self):
        piece = Furniture(model="models/lamp.obj", catalog_id="lamp-1")
        assert ModelResolver().resolve(piece).rule == "mesh_file"

    def test_nothing_to_resolve(self):
        assert ModelResolver().resolve(Furniture()) is None
        assert ModelResolver().resolve_reference("   ") is None

    def test_describe_lists_rules_in_order(self):
        names = [name for name, _ in ModelResolver().describe()]
        assert names == ["archive_entry_mesh", "archive_entry", "mesh_file", "pre_resolved"]


class TestFetchers:
    """Tests for resource fetchers."""

    @pytest.mark.asyncio
    async def test_local_fetch(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            os.makedirs(os.path.join(tmpdir, "models"))
            with open(os.path.join(tmpdir, "models", "chair.zip"), "wb") as f:
                f.write(b"zip bytes")

            async with LocalResourceFetcher(tmpdir) as fetcher:
                assert await fetcher.fetch("models/chair.zip") == b"zip bytes"

    @pytest.mark.asyncio
    async def test_local_missing_resource(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            fetcher = LocalResourceFetcher(tmpdir)
            with pytest.raises(ResourceNotFoundError):
                await fetcher.fetch("models/missing.zip")

    def test_http_url_joining(self):
        fetcher = HttpResourceFetcher("http://host/resources")
        assert fetcher.url_for("models/chair.zip") == "http://host/resources/models/chair.zip"
        assert fetcher.url_for("/models/chair.zip") == "http://host/resources/models/chair.zip"

    def test_http_absolute_url_needs_opt_in(self):
        with pytest.raises(ResourceNotFoundError):
            HttpResourceFetcher("http://host/resources").url_for("https://cdn/x.png")
        fetcher = HttpResourceFetcher("http://host/resources", allow_urls=True)
        assert fetcher.url_for("https://cdn/x.png") == "https://cdn/x.png"

    @pytest.mark.parametrize("path", ["../admin/keys", "models/../../secret"])
    def test_http_path_cannot_leave_base_url(self, path):
        with pytest.raises(ResourceNotFoundError):
            HttpResourceFetcher("http://host/resources").url_for(path)

    def test_http_scheme_relative_path_stays_under_base_url(self):
        url = HttpResourceFetcher("http://host/resources").url_for("//evil.example/x")
        assert url == "http://host/resources/evil.example/x"

    @pytest.mark.asyncio
    async def test_local_path_traversal_is_refused(self):
        """Paths escaping the resource root are refused."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = os.path.join(tmpdir, "resources")
            os.makedirs(root)
            secret = os.path.join(tmpdir, "secret.txt")
            with open(secret, "wb") as f:
                f.write(b"TOP-SECRET")

            fetcher = LocalResourceFetcher(root)
            for path in (secret, "../secret.txt", "models/../../secret.txt"):
                with pytest.raises(ResourceNotFoundError):
                    await fetcher.fetch(path)

    @pytest.mark.asyncio
    async def test_local_absolute_path_inside_root(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with open(os.path.join(tmpdir, "wood.png"), "wb") as f:
                f.write(b"png")
            fetcher = LocalResourceFetcher(tmpdir)
            assert await fetcher.fetch(os.path.join(tmpdir, "wood.png")) == b"png"
            assert await fetcher.fetch("textures/../wood.png") == b"png"

    @pytest.mark.asyncio
    async def test_local_remote_url_needs_opt_in(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            fetcher = LocalResourceFetcher(tmpdir)
            with pytest.raises(ResourceNotFoundError, match="not allowed"):
                await fetcher.fetch("http://169.254.169.254/latest/meta-data")
            assert fetcher._http is None

    def test_create_fetcher_from_config(self):
        assert isinstance(create_fetcher(ExportConfig(resource_root="lib")), LocalResourceFetcher)
        remote = create_fetcher(ExportConfig(resource_root="https://host/lib", fetch_timeout=5))
        assert isinstance(remote, HttpResourceFetcher)
        assert remote.timeout == 5
        assert remote.allow_urls is False
        local = create_fetcher(ExportConfig(resource_root="lib", allow_remote_urls=True))
        assert local.allow_urls is True


class TestModelArchive:
    """Tests for model archive reading."""

    def test_reads_mesh_material_library_and_images(self):
        data = make_zip(
            {
                "chair/chair.obj": "v 0 0 0\n",
                "chair/other.mtl": "newmtl other\n",
                "chair/chair.mtl": "newmtl seat\n",
                "chair/textures/Seat.PNG": b"png",
            }
        )
        archive = ModelArchive.from_bytes(data)
        assert archive.mesh_name == "chair/chair.obj"
        assert archive.mtl_name == "chair/chair.mtl"
        assert archive.mtl_text == "newmtl seat\n"
        assert archive.find_image("textures\\seat.png") == b"png"
        assert archive.find_image("missing.png") is None

    def test_any_material_library_when_names_differ(self):
        archive = ModelArchive.from_bytes(make_zip({"lamp.obj": "", "materials.mtl": "x"}))
        assert archive.mtl_name == "materials.mtl"

    def test_no_material_library(self):
        archive = ModelArchive.from_bytes(make_zip({"lamp.obj": "v 0 0 0\n"}))
        assert archive.mtl_text is None

    def test_archive_without_mesh(self):
        with pytest.raises(ModelArchiveError, match="No OBJ file"):
            ModelArchive.from_bytes(make_zip({"readme.txt": "hello"}))

    def test_not_a_zip(self):
        with pytest.raises(ModelArchiveError):
            ModelArchive.from_bytes(b"definitely not a zip")
