"""Pure image transformation helpers that prepare receipt photos for OCR."""

from __future__ import annotations

import io
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from PIL.Image import Image

MAX_UPSCALE = 2.5  # Never enlarge by more than this, even for tiny images
TARGET_MAX_DIMENSION = 2500  # Longer edge after scaling
BINARIZE_THRESHOLD = 142  # Luminance above this becomes white

# ITU-R BT.709 luma weights, as a PIL RGB -> L conversion matrix
LUMINANCE_MATRIX = (0.2126, 0.7152, 0.0722, 0.0)


class DecodeError(ValueError):
    """Raised when input bytes cannot be interpreted as an image."""


def compute_scale_factor(
    width: int,
    height: int,
    max_upscale: float = MAX_UPSCALE,
    target_max_dimension: int = TARGET_MAX_DIMENSION,
) -> float:
    """Return the resample factor that brings the longer edge to the target size."""
    longest = max(width, height)
    if longest <= 0:
        raise DecodeError(f"Image has no pixels ({width}x{height})")
    return min(max_upscale, target_max_dimension / longest)


def decode_image(image_bytes: bytes) -> Image:
    """Decode bytes into a PIL image with EXIF orientation applied."""
    from PIL import Image as PILImage
    from PIL import ImageOps

    try:
        img = PILImage.open(io.BytesIO(image_bytes))
        img.load()
    except (OSError, PILImage.DecompressionBombError) as e:
        raise DecodeError(f"Could not decode image: {e}") from e

    # Phone photos are usually stored sideways with an orientation tag
    return ImageOps.exif_transpose(img)


def _flatten_to_rgb(img: Image) -> Image:
    from PIL import Image as PILImage

    if img.mode == "P":
        img = img.convert("RGBA")
    if "A" in img.getbands():
        # Transparent areas should read as paper, not ink
        background = PILImage.new("RGB", img.size, (255, 255, 255))
        background.paste(img.convert("RGBA"), mask=img.convert("RGBA").getchannel("A"))
        return background
    return img.convert("RGB")


def preprocess_image(
    img: Image,
    threshold: int = BINARIZE_THRESHOLD,
    max_upscale: float = MAX_UPSCALE,
    target_max_dimension: int = TARGET_MAX_DIMENSION,
) -> Image:
    """
    Scale and binarize a decoded receipt image.

    Args:
        img: Decoded image in any PIL mode
        threshold: Luminance cutoff; pixels strictly above it become white
        max_upscale: Upper bound on the scale factor
        target_max_dimension: Desired length of the longer edge

    Returns:
        A new mode "L" image whose pixels are all either 0 or 255
    """
    from PIL import Image as PILImage

    width, height = img.size
    scale = compute_scale_factor(width, height, max_upscale, target_max_dimension)

    rgb = _flatten_to_rgb(img)
    if scale != 1.0:
        new_size = (max(1, round(width * scale)), max(1, round(height * scale)))
        rgb = rgb.resize(new_size, PILImage.Resampling.LANCZOS)

    luminance = rgb.convert("L", LUMINANCE_MATRIX)
    return luminance.point(lambda value: 255 if value > threshold else 0)


def preprocess_image_bytes(image_bytes: bytes, threshold: int = BINARIZE_THRESHOLD) -> Image:
    """Decode and preprocess raw image bytes. Raises DecodeError on bad input."""
    return preprocess_image(decode_image(image_bytes), threshold=threshold)


def image_to_png_bytes(img: Image) -> bytes:
    """Encode an image as PNG (lossless, keeps the binarization intact)."""
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()
