"""Image transcoding pipeline and the worker pool that keeps it off the event loop."""
import asyncio
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from transcoder.config import MAX_WORKERS
from transcoder.conversion.codecs import decode_image, encode
from transcoder.conversion.errors import InvalidImageError
from transcoder.conversion.models import (
    ConversionMetrics,
    ConversionRequest,
    ConversionResult,
    FailureKind,
)

logger = logging.getLogger("converter.service")


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000.0


def convert(request: ConversionRequest) -> ConversionResult:
    """Decode request.image and re-encode it as request.target_format.

    Blocking and CPU-bound. Never raises for bad input or encoder trouble: the
    first failing step decides the result and nothing after it runs.
    """
    started = time.perf_counter()
    metrics = ConversionMetrics(input_size=len(request.image))
    logger.info("Converting image of %d KB", metrics.input_size // 1024)

    try:
        decoded = decode_image(request.image)
    except InvalidImageError as e:
        metrics.elapsed_ms = _elapsed_ms(started)
        logger.warning("Rejected input (%d bytes): %s", metrics.input_size, e)
        return ConversionResult.failed(FailureKind.INVALID_INPUT, metrics)

    try:
        data = encode(decoded, request)
    except Exception as e:
        metrics.elapsed_ms = _elapsed_ms(started)
        logger.exception("Encoding to %s failed: %s", request.target_format.pillow_format, e)
        return ConversionResult.failed(FailureKind.ENCODE_ERROR, metrics)

    metrics.output_size = len(data)
    metrics.elapsed_ms = _elapsed_ms(started)
    logger.info(
        "Took %d ms with the new image being %d KB",
        metrics.elapsed_ms,
        metrics.output_size // 1024,
    )
    return ConversionResult.success(data, metrics)


class ConversionService:
    """Runs conversions on a bounded thread pool."""

    def __init__(self, max_workers: int = MAX_WORKERS):
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="transcode")
        self.max_workers = max_workers
        logger.info("ConversionService initialized with max_workers=%s", max_workers)

    def convert(self, request: ConversionRequest) -> ConversionResult:
        """Run the pipeline on the calling thread."""
        return convert(request)

    async def convert_async(self, request: ConversionRequest) -> ConversionResult:
        """Run the pipeline on a worker thread and suspend until it finishes.

        There is no cancellation: a started conversion runs to completion even if
        the awaiting coroutine goes away.
        """
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, convert, request)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)
        logger.info("ConversionService shut down")


# Singleton
_conversion_service: Optional[ConversionService] = None


def get_conversion_service() -> ConversionService:
    global _conversion_service
    if _conversion_service is None:
        _conversion_service = ConversionService()
    return _conversion_service


def reset_conversion_service() -> None:
    global _conversion_service
    if _conversion_service is not None:
        _conversion_service.shutdown()
        _conversion_service = None
