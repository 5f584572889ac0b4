"""API routes for image conversion."""
import logging

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import Response

from transcoder.api.wire import WIRE_FORMAT_NAMES, WireFormatError, decode_request
from transcoder.config import MAX_BODY_SIZE_BYTES, MAX_BODY_SIZE_MB, MAX_WORKERS
from transcoder.conversion.codecs import (
    AVIF_DEFAULT_QUALITY,
    AVIF_DEFAULT_SPEED,
    JPEG_DEFAULT_QUALITY,
)
from transcoder.conversion.models import ImageFormat
from transcoder.conversion.service import get_conversion_service

logger = logging.getLogger("converter.api")
router = APIRouter(tags=["converter"])


async def _read_body(request: Request) -> bytes:
    """Read the request body, raising 413 as soon as it passes MAX_BODY_SIZE_BYTES."""
    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > MAX_BODY_SIZE_BYTES:
        raise HTTPException(413, f"Body too large (max {MAX_BODY_SIZE_MB} MB)")
    chunks: list[bytes] = []
    total = 0
    async for chunk in request.stream():
        total += len(chunk)
        if total > MAX_BODY_SIZE_BYTES:
            raise HTTPException(413, f"Body too large (max {MAX_BODY_SIZE_MB} MB)")
        chunks.append(chunk)
    return b"".join(chunks)


@router.post("/convert")
async def convert_image(request: Request):
    """Convert a MessagePack-encoded image request. Returns the raw encoded image."""
    body = await _read_body(request)
    try:
        conversion_request = decode_request(body)
    except WireFormatError as e:
        logger.warning("Bad conversion envelope: %s", e)
        return Response(status_code=400)

    svc = get_conversion_service()
    result = await svc.convert_async(conversion_request)
    headers = {
        "X-Input-Size": str(result.metrics.input_size),
        "X-Output-Size": str(result.metrics.output_size),
        "X-Elapsed-Ms": f"{result.metrics.elapsed_ms:.1f}",
    }
    if not result.ok:
        return Response(status_code=result.status_code, headers=headers)
    return Response(
        content=result.data,
        status_code=result.status_code,
        media_type="application/octet-stream",
        headers=headers,
    )


@router.get("/health")
def health():
    return {"status": "ok"}


@router.get("/limits")
def get_limits():
    """Return the body size limit and worker pool size."""
    return {
        "max_body_size_mb": MAX_BODY_SIZE_MB,
        "max_body_size_bytes": MAX_BODY_SIZE_BYTES,
        "max_workers": MAX_WORKERS,
    }


@router.get("/formats")
def get_formats():
    """Target formats with their wire names and parameter defaults (None = not tunable)."""
    return {
        ImageFormat.JPEG.value: {
            "wire_name": WIRE_FORMAT_NAMES[ImageFormat.JPEG],
            "lossless": False,
            "encoding_quality": JPEG_DEFAULT_QUALITY,
            "encoding_speed": None,
        },
        ImageFormat.AVIF.value: {
            "wire_name": WIRE_FORMAT_NAMES[ImageFormat.AVIF],
            "lossless": False,
            "encoding_quality": AVIF_DEFAULT_QUALITY,
            "encoding_speed": AVIF_DEFAULT_SPEED,
        },
        ImageFormat.PNG.value: {
            "wire_name": WIRE_FORMAT_NAMES[ImageFormat.PNG],
            "lossless": True,
            "encoding_quality": None,
            "encoding_speed": None,
        },
        ImageFormat.WEBP.value: {
            "wire_name": WIRE_FORMAT_NAMES[ImageFormat.WEBP],
            "lossless": True,
            "encoding_quality": None,
            "encoding_speed": None,
        },
    }
