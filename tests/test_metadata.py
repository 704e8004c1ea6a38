"""Tests for media metadata extraction."""

import io

from PIL import ExifTags, Image

from aria.ingestion.metadata import _to_degrees, extract_file_metadata, extract_image_metadata


def _jpeg(exif=None, size=(32, 16)) -> bytes:
    buffer = io.BytesIO()
    image = Image.new("RGB", size, color="white")
    if exif is not None:
        image.save(buffer, "JPEG", exif=exif)
    else:
        image.save(buffer, "JPEG")
    return buffer.getvalue()


def test_reads_camera_and_capture_date():
    exif = Image.Exif()
    exif[ExifTags.Base.Make] = "Canon"
    exif[ExifTags.Base.Model] = "EOS R5"
    exif[ExifTags.Base.DateTime] = "2023:06:01 12:30:00"

    metadata = extract_image_metadata(_jpeg(exif))

    assert metadata["width"] == 32
    assert metadata["height"] == 16
    assert metadata["camera_make"] == "Canon"
    assert metadata["camera_model"] == "EOS R5"
    assert metadata["capture_at"] == "2023-06-01T12:30:00"
    assert metadata["meta"]["Make"] == "Canon"


def test_image_without_exif_has_dimensions_only():
    assert extract_image_metadata(_jpeg(size=(4, 3))) == {"width": 4, "height": 3}


def test_gps_degrees():
    assert _to_degrees((40, 26, 46), "N") == 40.446111
    assert _to_degrees((79, 58, 56), "W") == -79.982222
    assert _to_degrees(None, "N") is None


def test_unreadable_image_returns_empty():
    assert extract_image_metadata(b"not an image") == {}


def test_non_image_types_are_skipped():
    assert extract_file_metadata(b"%PDF-1.4", "application/pdf") == {}
    assert extract_file_metadata(_jpeg(), "image/jpeg")["width"] == 32
