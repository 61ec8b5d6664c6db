"""
Gateway API route handlers.

Provides:
- Categorization (POST /api/v1/categorize)
- Health check (GET /api/v1/health)

The content extractor is taken from `app.state.extractor` when set, so the
application (or a test) can plug in its own transcriber, detector or fake.
"""

import base64
import binascii
import tempfile
from datetime import datetime, timezone
from pathlib import Path

import pytesseract
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from autocat import __version__
from autocat.config import get
from autocat.corpus import CategoryDirectory, InMemoryCorpusReader
from autocat.engine import CategorizationEngine
from autocat.exceptions import ContentUnavailableError, UnsupportedFileTypeError
from autocat.extraction import ContentExtractionService, LocalContentExtractionService
from autocat.logging_config import get_logger
from autocat.models import ReferenceImage
from autocat.service import CategorizationService
from autocat.settings import load_settings
from autocat.gateway.schemas import CategorizeRequest, CategorizeResponse, HealthStatus

logger = get_logger(__name__)


def _error(message: str, code: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message, "code": code}, status_code=status_code)


def _decode_base64(data: str, what: str) -> bytes:
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"{what} is not valid base64: {e}") from e


def _get_extractor(request: Request) -> ContentExtractionService:
    extractor = getattr(request.app.state, "extractor", None)
    if extractor is None:
        extractor = LocalContentExtractionService()
        request.app.state.extractor = extractor
    return extractor


def _get_engine(request: Request) -> CategorizationEngine:
    engine = getattr(request.app.state, "engine", None)
    if engine is None:
        engine = CategorizationEngine(load_settings())
        request.app.state.engine = engine
    return engine


def _categorize(
    service: CategorizationService,
    body: CategorizeRequest,
    file_bytes: bytes,
    reference_images: list[ReferenceImage],
):
    # Keep the extension so type detection and decoders see the real format
    suffix = Path(body.filename).suffix
    with tempfile.TemporaryDirectory(prefix="autocat-") as tmp_dir:
        path = Path(tmp_dir) / f"upload{suffix}"
        path.write_bytes(file_bytes)
        result = service.categorize_file(
            path,
            file_type=body.file_type,
            mime_type=body.mime_type,
            reference_images=reference_images,
        )
    result.raw["filename"] = body.filename
    return result


async def api_categorize(request: Request) -> JSONResponse:
    """
    Categorize one uploaded file against the supplied corpus.

    POST /api/v1/categorize
    """
    try:
        body = CategorizeRequest.model_validate(await request.json())
        file_bytes = _decode_base64(body.content_base64, "content_base64")
        reference_images = [
            ReferenceImage(
                image_id=ref.image_id,
                filename=ref.filename,
                image_bytes=_decode_base64(ref.image_base64, f"reference image {ref.image_id}"),
                visual_matches=ref.visual_matches,
            )
            for ref in body.reference_images
        ]
    except (ValidationError, ValueError) as e:
        return _error(f"Invalid request body: {e}", "BAD_REQUEST", 400)

    service = CategorizationService(
        extractor=_get_extractor(request),
        corpus_reader=InMemoryCorpusReader.from_raw(body.corpus),
        directory=CategoryDirectory.from_raw(body.categories),
        engine=_get_engine(request),
    )

    try:
        result = await run_in_threadpool(_categorize, service, body, file_bytes, reference_images)
    except UnsupportedFileTypeError as e:
        return _error(str(e), "UNSUPPORTED_FILE_TYPE", 400)
    except ContentUnavailableError as e:
        logger.warning(f"Content unavailable for {body.filename}: {e}")
        return _error(str(e), "CONTENT_UNAVAILABLE", 422)

    response = CategorizeResponse(
        category=result.category,
        confidence=result.confidence,
        dest_path=result.dest_path,
        matches=result.matches,
        raw=result.raw,
    )
    return JSONResponse(response.model_dump(mode="json"))


def _tesseract_available() -> bool:
    try:
        pytesseract.get_tesseract_version()
        return True
    except (pytesseract.TesseractNotFoundError, OSError):
        return False


async def api_health(request: Request) -> JSONResponse:
    """
    Service health check.

    GET /api/v1/health
    """
    status = HealthStatus(
        healthy=True,
        service=get("app", "service_name"),
        timestamp=datetime.now(timezone.utc),
        version=__version__,
        ocr_available=await run_in_threadpool(_tesseract_available),
    )
    return JSONResponse(status.model_dump(mode="json"))


gateway_routes = [
    Route("/api/v1/categorize", api_categorize, methods=["POST"]),
    Route("/api/v1/health", api_health, methods=["GET"]),
]
