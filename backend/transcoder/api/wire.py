"""MessagePack envelope for /convert.

Body is a map {"image": bin, "new_format": str, "encoding_speed": int|nil, "encoding_quality": int|nil}
or the same fields as a positional array [image, new_format, encoding_speed, encoding_quality],
the layout struct-as-array MessagePack serializers write. Trailing optional fields may be omitted.
"""
from typing import Any, Optional

import msgpack

from transcoder.conversion.models import ConversionRequest, ImageFormat

# Wire variant names, one per ImageFormat
WIRE_FORMAT_NAMES = {
    ImageFormat.JPEG: "Jpg",
    ImageFormat.AVIF: "Avif",
    ImageFormat.PNG: "Png",
    ImageFormat.WEBP: "Webp",
}
_U8_MAX = 255
_FIELDS = ("image", "new_format", "encoding_speed", "encoding_quality")


class WireFormatError(ValueError):
    """Body is not a valid conversion envelope."""


def _optional_u8(envelope: dict, key: str) -> Optional[int]:
    value = envelope.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise WireFormatError(f"{key} must be an integer or nil")
    if not 0 <= value <= _U8_MAX:
        raise WireFormatError(f"{key} out of range 0-{_U8_MAX}: {value}")
    return value


def decode_request(body: bytes) -> ConversionRequest:
    try:
        envelope: Any = msgpack.unpackb(body, raw=False)
    except Exception as e:
        raise WireFormatError(f"invalid MessagePack body: {e}") from e
    if isinstance(envelope, (list, tuple)):
        if not 2 <= len(envelope) <= len(_FIELDS):
            raise WireFormatError(f"envelope array must have 2-{len(_FIELDS)} elements, got {len(envelope)}")
        envelope = dict(zip(_FIELDS, envelope))
    if not isinstance(envelope, dict):
        raise WireFormatError("envelope must be a map or an array")

    image = envelope.get("image")
    if not isinstance(image, (bytes, bytearray)):
        raise WireFormatError("image must be binary")
    fmt = envelope.get("new_format", envelope.get("target_format"))
    if fmt is None:
        raise WireFormatError("new_format is required")
    try:
        target_format = ImageFormat.parse(fmt)
    except ValueError as e:
        raise WireFormatError(str(e)) from e

    return ConversionRequest(
        image=bytes(image),
        target_format=target_format,
        encoding_speed=_optional_u8(envelope, "encoding_speed"),
        encoding_quality=_optional_u8(envelope, "encoding_quality"),
    )


def encode_request(request: ConversionRequest) -> bytes:
    return msgpack.packb(
        {
            "image": request.image,
            "new_format": WIRE_FORMAT_NAMES[request.target_format],
            "encoding_speed": request.encoding_speed,
            "encoding_quality": request.encoding_quality,
        },
        use_bin_type=True,
    )
