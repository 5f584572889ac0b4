"""Tests for conversion request/result models."""
import pytest

from transcoder.conversion.models import (
    ConversionMetrics,
    ConversionRequest,
    ConversionResult,
    FailureKind,
    ImageFormat,
)


class TestImageFormatParse:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("jpeg", ImageFormat.JPEG),
            ("JPEG", ImageFormat.JPEG),
            ("Jpg", ImageFormat.JPEG),
            ("avif", ImageFormat.AVIF),
            ("Png", ImageFormat.PNG),
            (" webp ", ImageFormat.WEBP),
            (ImageFormat.WEBP, ImageFormat.WEBP),
        ],
    )
    def test_accepts_known_names(self, value, expected):
        assert ImageFormat.parse(value) is expected

    @pytest.mark.parametrize("value", ["gif", "tiff", "", "jpe g", 3, None])
    def test_rejects_everything_else(self, value):
        with pytest.raises(ValueError):
            ImageFormat.parse(value)

    @pytest.mark.parametrize("fmt", list(ImageFormat))
    def test_member_and_wire_names_round_trip(self, fmt):
        from transcoder.api.wire import WIRE_FORMAT_NAMES

        assert ImageFormat.parse(fmt.name) is fmt
        assert ImageFormat.parse(fmt.name.lower()) is fmt
        assert ImageFormat.parse(WIRE_FORMAT_NAMES[fmt]) is fmt
        assert ImageFormat.parse(WIRE_FORMAT_NAMES[fmt].upper()) is fmt

    def test_pillow_format_names(self):
        assert [f.pillow_format for f in ImageFormat] == ["JPEG", "AVIF", "PNG", "WEBP"]


class TestConversionRequest:
    def test_coerces_format_and_image(self):
        req = ConversionRequest(image=bytearray(b"abc"), target_format="Webp")
        assert req.image == b"abc"
        assert isinstance(req.image, bytes)
        assert req.target_format is ImageFormat.WEBP
        assert req.encoding_speed is None
        assert req.encoding_quality is None

    def test_out_of_range_hints_are_kept(self):
        req = ConversionRequest(b"x", ImageFormat.JPEG, encoding_speed=200, encoding_quality=250)
        assert req.encoding_speed == 200
        assert req.encoding_quality == 250

    def test_unknown_format_rejected(self):
        with pytest.raises(ValueError):
            ConversionRequest(b"x", "bmp")

    @pytest.mark.parametrize("field", ["encoding_speed", "encoding_quality"])
    @pytest.mark.parametrize("bad", ["10", 1.5, True])
    def test_non_integer_hints_rejected(self, field, bad):
        with pytest.raises(ValueError):
            ConversionRequest(b"x", ImageFormat.AVIF, **{field: bad})

    def test_image_must_be_bytes(self):
        with pytest.raises(ValueError):
            ConversionRequest("not bytes", ImageFormat.PNG)


class TestConversionResult:
    def test_success(self):
        result = ConversionResult.success(b"data", ConversionMetrics(input_size=10, output_size=4))
        assert result.ok
        assert result.status_code == 200
        assert result.data == b"data"

    @pytest.mark.parametrize(
        "kind, status", [(FailureKind.INVALID_INPUT, 400), (FailureKind.ENCODE_ERROR, 500)]
    )
    def test_failure_status(self, kind, status):
        result = ConversionResult.failed(kind, ConversionMetrics(input_size=10))
        assert not result.ok
        assert result.failure is kind
        assert result.status_code == status
        assert result.data == b""
