"""Conversion request/result models."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union


class ImageFormat(str, Enum):
    JPEG = "jpeg"
    AVIF = "avif"
    PNG = "png"
    WEBP = "webp"

    @property
    def pillow_format(self) -> str:
        """Format name Pillow uses to save and report this container."""
        return self.name

    @classmethod
    def parse(cls, value: Union["ImageFormat", str]) -> "ImageFormat":
        """Accept a member, or a case-insensitive value, member name or wire variant name (Jpg, Webp, ...)."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ValueError(f"Unsupported target format: {value!r}")
        key = value.strip().lower()
        fmt = _ALIASES.get(key)
        if fmt is None:
            raise ValueError(f"Unsupported target format: {value!r}")
        return fmt


_ALIASES = {fmt.value: fmt for fmt in ImageFormat}
_ALIASES.update({fmt.name.lower(): fmt for fmt in ImageFormat})
# Wire variant names (Jpg, Avif, Png, Webp) lower-case to a value, except Jpg
_ALIASES["jpg"] = ImageFormat.JPEG


class FailureKind(str, Enum):
    INVALID_INPUT = "invalid_input"
    ENCODE_ERROR = "encode_error"

    @property
    def status_code(self) -> int:
        return 400 if self is FailureKind.INVALID_INPUT else 500


def _check_optional_int(name: str, value) -> None:
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer or None, got {type(value).__name__}")


@dataclass(frozen=True)
class ConversionRequest:
    """What to convert and how. Speed/quality are hints, clamped by the encoder."""

    image: bytes
    target_format: ImageFormat
    encoding_speed: Optional[int] = None
    encoding_quality: Optional[int] = None

    def __post_init__(self):
        if not isinstance(self.image, (bytes, bytearray, memoryview)):
            raise ValueError(f"image must be bytes, got {type(self.image).__name__}")
        object.__setattr__(self, "image", bytes(self.image))
        object.__setattr__(self, "target_format", ImageFormat.parse(self.target_format))
        _check_optional_int("encoding_speed", self.encoding_speed)
        _check_optional_int("encoding_quality", self.encoding_quality)


@dataclass
class DecodedImage:
    """Raw pixels of one decoded frame. Owned by a single pipeline call."""

    pixels: bytes
    width: int
    height: int
    mode: str


@dataclass
class ConversionMetrics:
    input_size: int  # bytes
    output_size: int = 0  # bytes
    elapsed_ms: float = 0.0


@dataclass(frozen=True)
class ConversionResult:
    data: bytes = b""
    failure: Optional[FailureKind] = None
    metrics: ConversionMetrics = field(default_factory=lambda: ConversionMetrics(input_size=0))

    @classmethod
    def success(cls, data: bytes, metrics: ConversionMetrics) -> "ConversionResult":
        return cls(data=data, failure=None, metrics=metrics)

    @classmethod
    def failed(cls, kind: FailureKind, metrics: ConversionMetrics) -> "ConversionResult":
        return cls(data=b"", failure=kind, metrics=metrics)

    @property
    def ok(self) -> bool:
        return self.failure is None

    @property
    def status_code(self) -> int:
        return 200 if self.failure is None else self.failure.status_code
