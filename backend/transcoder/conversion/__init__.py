from .service import ConversionService, convert, get_conversion_service
from .models import ConversionRequest, ConversionResult, FailureKind, ImageFormat

__all__ = [
    "ConversionService",
    "convert",
    "get_conversion_service",
    "ConversionRequest",
    "ConversionResult",
    "FailureKind",
    "ImageFormat",
]
