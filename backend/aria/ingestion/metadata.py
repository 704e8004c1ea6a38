"""Media metadata extraction with Pillow."""

import io
from datetime import datetime
from typing import Any, Optional

from PIL import ExifTags, Image, UnidentifiedImageError

from ..logging import get_logger

logger = get_logger(__name__)

EXIF_DATE_FORMAT = "%Y:%m:%d %H:%M:%S"


def _to_degrees(value: Any, ref: Optional[str]) -> Optional[float]:
    """Convert an EXIF (deg, min, sec) triple to signed decimal degrees."""
    try:
        degrees, minutes, seconds = (float(v) for v in value)
    except (TypeError, ValueError):
        return None
    decimal = degrees + minutes / 60 + seconds / 3600
    if ref in ("S", "W"):
        decimal = -decimal
    return round(decimal, 6)


def _parse_exif_date(value: Any) -> Optional[str]:
    if not value:
        return None
    try:
        return datetime.strptime(str(value).strip("\x00 "), EXIF_DATE_FORMAT).isoformat()
    except ValueError:
        return None


def extract_image_metadata(data: bytes) -> dict[str, Any]:
    """
    Read dimensions, capture date, camera and GPS position from an image.

    Args:
        data: Image bytes.

    Returns:
        Dict with any of width, height, capture_at, camera_make, camera_model,
        gps_lat, gps_lon and meta. Empty when the image cannot be read.
    """
    try:
        with Image.open(io.BytesIO(data)) as image:
            width, height = image.size
            exif = image.getexif()
    except (UnidentifiedImageError, OSError) as e:
        logger.warning(f"Could not read image metadata: {e}")
        return {}

    metadata: dict[str, Any] = {"width": width, "height": height}

    exif_ifd = exif.get_ifd(ExifTags.IFD.Exif)
    capture_at = _parse_exif_date(
        exif_ifd.get(ExifTags.Base.DateTimeOriginal) or exif.get(ExifTags.Base.DateTime)
    )
    if capture_at:
        metadata["capture_at"] = capture_at

    make = exif.get(ExifTags.Base.Make)
    model = exif.get(ExifTags.Base.Model)
    if make:
        metadata["camera_make"] = str(make).strip("\x00 ")
    if model:
        metadata["camera_model"] = str(model).strip("\x00 ")

    gps = exif.get_ifd(ExifTags.IFD.GPSInfo)
    if gps:
        lat = _to_degrees(gps.get(ExifTags.GPS.GPSLatitude), gps.get(ExifTags.GPS.GPSLatitudeRef))
        lon = _to_degrees(gps.get(ExifTags.GPS.GPSLongitude), gps.get(ExifTags.GPS.GPSLongitudeRef))
        if lat is not None and lon is not None:
            metadata["gps_lat"] = lat
            metadata["gps_lon"] = lon

    if exif:
        metadata["meta"] = {
            ExifTags.TAGS.get(tag, str(tag)): str(value)
            for tag, value in exif.items()
            if isinstance(value, (str, int, float))
        }

    return metadata


def extract_file_metadata(data: bytes, mime_type: str) -> dict[str, Any]:
    """Extract media metadata for supported MIME types ({} otherwise)."""
    if (mime_type or "").lower().startswith("image/"):
        return extract_image_metadata(data)
    return {}
