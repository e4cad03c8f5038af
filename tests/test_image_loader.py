"""
Tests for image loading and mockup artifacts.
"""

import base64
from io import BytesIO

import pytest
from PIL import Image

from conftest import make_png
from design_genius.io.image_loader import (
    ArtifactManager,
    ImageLoader,
    data_uri_to_png,
    mockup_filename,
    parse_data_uri,
    to_data_uri,
)
from design_genius.models import DeviceType, GeneratedMockup


def test_load_image_from_bytes():
    """Test loading an image from raw bytes."""
    loader = ImageLoader()

    image = loader.load_image(make_png((120, 240)))

    assert image.mode == "RGB"
    assert image.size == (120, 240)


def test_load_image_keeps_transparency(logo_png):
    """Test that RGBA images keep their alpha channel."""
    image = ImageLoader().load_image(logo_png)
    assert image.mode == "RGBA"


def test_load_image_missing_file(tmp_path):
    """Test loading from a path that does not exist."""
    with pytest.raises(FileNotFoundError):
        ImageLoader().load_image(tmp_path / "missing.png")


def test_load_image_rejects_garbage():
    """Test that unreadable bytes are rejected."""
    with pytest.raises(ValueError):
        ImageLoader().load_image(b"definitely not an image")


def test_to_png_bytes_converts_jpeg():
    """Test re-encoding a JPEG upload as PNG."""
    buffer = BytesIO()
    Image.new("RGB", (50, 50), color="blue").save(buffer, format="JPEG")

    png = ImageLoader().to_png_bytes(buffer.getvalue())

    assert png.startswith(b"\x89PNG")


def test_to_png_bytes_downscales_large_images():
    """Test that oversized images are scaled down."""
    loader = ImageLoader(max_dimension=100)

    png = loader.to_png_bytes(make_png((400, 200)))

    assert Image.open(BytesIO(png)).size == (100, 50)


def test_validate_upload():
    """Test upload validation messages."""
    loader = ImageLoader()

    assert loader.validate_upload(make_png(), "Screenshot") == (True, None)

    is_valid, error = loader.validate_upload(b"", "Screenshot")
    assert not is_valid
    assert "empty" in error

    is_valid, error = loader.validate_upload(b"nope", "Logo")
    assert not is_valid
    assert error.startswith("Logo")


def test_data_uri_helpers():
    """Test encoding and decoding data URIs."""
    uri = to_data_uri(b"abc", "image/jpeg")

    assert uri == "data:image/jpeg;base64," + base64.b64encode(b"abc").decode()
    assert parse_data_uri(uri) == ("image/jpeg", b"abc")

    with pytest.raises(ValueError):
        parse_data_uri("https://example.com/image.png")


def test_data_uri_to_png_reencodes_other_formats():
    """Test that downloads are always PNG."""
    buffer = BytesIO()
    Image.new("RGB", (20, 20), color="green").save(buffer, format="JPEG")

    png = data_uri_to_png(to_data_uri(buffer.getvalue(), "image/jpeg"))

    assert png.startswith(b"\x89PNG")


def test_mockup_filename():
    """Test download file names built from concept names."""
    mockup = GeneratedMockup(id="mockup-1", concept_name="Bold & Disruptive!", description="")
    assert mockup_filename(mockup, DeviceType.DESKTOP) == "bold-disruptive-desktop.png"

    unnamed = GeneratedMockup(id="mockup-2", concept_name="???", description="")
    assert mockup_filename(unnamed, DeviceType.MOBILE) == "mockup-2-mobile.png"


def test_artifact_manager_saves_rendered_views(tmp_path):
    """Test saving only the views that have images."""
    png = make_png((10, 20))
    mockup = GeneratedMockup(
        id="mockup-0",
        concept_name="Minimal Tech",
        description="",
        mobile_image_url=to_data_uri(png),
    )

    manager = ArtifactManager(tmp_path / "outputs")
    saved = manager.save_mockup("session-1", mockup)

    assert set(saved) == {"mobile"}
    assert saved["mobile"].read_bytes() == png
    assert saved["mobile"].parent == tmp_path / "outputs" / "session-1" / "mockups"
    assert manager.save_mockup_view("session-1", mockup, DeviceType.DESKTOP) is None
