"""Decode any Pillow-readable image and encode it as JPEG, AVIF, PNG or WebP."""
import io
import logging
from typing import Optional

from PIL import Image

from transcoder.conversion.errors import EncodeFailedError, InvalidImageError
from transcoder.conversion.models import ConversionRequest, DecodedImage, ImageFormat

logger = logging.getLogger("converter.codecs")

# Encoder defaults: maximum quality, fastest AVIF encode
JPEG_DEFAULT_QUALITY = 100
AVIF_DEFAULT_SPEED = 10
AVIF_DEFAULT_QUALITY = 100
QUALITY_RANGE = (0, 100)
AVIF_SPEED_RANGE = (0, 10)
PNG_COMPRESS_LEVEL = 6

# Layouts that no target container can write directly. 16-bit greyscale (I;16*) is
# kept: PNG writes it losslessly, JPEG rejects it.
_MODE_NORMALIZATION = {
    "1": "L",
    "CMYK": "RGB",
    "YCbCr": "RGB",
    "LAB": "RGB",
    "HSV": "RGB",
    "I": "L",
    "F": "L",
}


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def resolve_jpeg_params(quality: Optional[int]) -> int:
    if quality is None:
        return JPEG_DEFAULT_QUALITY
    return clamp(quality, *QUALITY_RANGE)


def resolve_avif_params(speed: Optional[int], quality: Optional[int]) -> tuple[int, int]:
    """Return (speed, quality); each falls back to its own default."""
    speed = AVIF_DEFAULT_SPEED if speed is None else clamp(speed, *AVIF_SPEED_RANGE)
    quality = AVIF_DEFAULT_QUALITY if quality is None else clamp(quality, *QUALITY_RANGE)
    return speed, quality


def _normalize(img: Image.Image) -> Image.Image:
    if img.mode in ("P", "PA"):
        has_alpha = img.mode == "PA" or "transparency" in img.info
        return img.convert("RGBA" if has_alpha else "RGB")
    target = _MODE_NORMALIZATION.get(img.mode)
    if target:
        return img.convert(target)
    return img


def decode_image(data: bytes) -> DecodedImage:
    """Sniff the container, decode the first frame and return its raw pixels.

    Any format Pillow recognizes is accepted. Raises InvalidImageError for empty,
    corrupt, truncated or unrecognized input.
    """
    if not data:
        raise InvalidImageError("empty input")
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            source_format = img.format
            frame = _normalize(img)
            decoded = DecodedImage(
                pixels=frame.tobytes(),
                width=frame.width,
                height=frame.height,
                mode=frame.mode,
            )
    except Exception as e:
        raise InvalidImageError(f"cannot decode image: {e}") from e
    logger.debug(
        "Decoded %s image %dx%d (%s)", source_format, decoded.width, decoded.height, decoded.mode
    )
    return decoded


def _write(decoded: DecodedImage, fmt: ImageFormat, **save_kw) -> bytes:
    buffer = io.BytesIO()
    try:
        img = Image.frombytes(decoded.mode, (decoded.width, decoded.height), decoded.pixels)
        img.save(buffer, format=fmt.pillow_format, **save_kw)
    except Exception as e:
        raise EncodeFailedError(f"cannot write {decoded.mode} image as {fmt.pillow_format}: {e}") from e
    return buffer.getvalue()


def encode_jpeg(decoded: DecodedImage, quality: Optional[int] = None) -> bytes:
    return _write(decoded, ImageFormat.JPEG, quality=resolve_jpeg_params(quality))


def encode_avif(decoded: DecodedImage, speed: Optional[int] = None, quality: Optional[int] = None) -> bytes:
    speed, quality = resolve_avif_params(speed, quality)
    return _write(decoded, ImageFormat.AVIF, speed=speed, quality=quality)


def encode_png(decoded: DecodedImage) -> bytes:
    """Lossless, default zlib level; Pillow picks the row filter adaptively."""
    return _write(decoded, ImageFormat.PNG, compress_level=PNG_COMPRESS_LEVEL)


def encode_webp(decoded: DecodedImage) -> bytes:
    """Always lossless. exact keeps RGB values under fully transparent pixels."""
    return _write(decoded, ImageFormat.WEBP, lossless=True, exact=True)


def _log_ignored_params(request: ConversionRequest) -> None:
    if request.encoding_speed is not None or request.encoding_quality is not None:
        logger.debug(
            "Ignoring speed=%s quality=%s for %s (no tunable parameters)",
            request.encoding_speed,
            request.encoding_quality,
            request.target_format.pillow_format,
        )


def encode(decoded: DecodedImage, request: ConversionRequest) -> bytes:
    """Encode with the encoder selected by request.target_format.

    The set of targets is closed: a new format needs a branch here.
    """
    fmt = request.target_format
    if fmt is ImageFormat.JPEG:
        return encode_jpeg(decoded, request.encoding_quality)
    if fmt is ImageFormat.AVIF:
        return encode_avif(decoded, request.encoding_speed, request.encoding_quality)
    if fmt is ImageFormat.PNG:
        _log_ignored_params(request)
        return encode_png(decoded)
    if fmt is ImageFormat.WEBP:
        _log_ignored_params(request)
        return encode_webp(decoded)
    raise EncodeFailedError(f"No encoder for target format {fmt!r}")
