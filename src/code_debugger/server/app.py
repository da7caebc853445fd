"""HTTP surface for the code debugger.

Routes:
- ``GET /``: liveness banner
- ``GET /health``: dependency health report
- ``POST /api/debug``: analyze an uploaded file, pasted code, or a JSON body
- ``POST /api/debug/ocr``: extract code text from a screenshot
"""

from __future__ import annotations

import contextlib
import json
import uuid
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import TYPE_CHECKING, Any

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from code_debugger._version import __version__
from code_debugger.core.dispatcher import AnalysisDispatcher, create_augmenter, create_dispatcher
from code_debugger.core.ingress import NO_CODE_ERROR, resolve_pasted, resolve_upload
from code_debugger.utils.async_helpers import InputError, OCRError
from code_debugger.utils.health import HealthChecker
from code_debugger.utils.logging import LogEventNames, bind_context, request_context

if TYPE_CHECKING:
    from code_debugger.config.schema import DebuggerConfig
    from code_debugger.core.ingress import CodeSubmission
    from code_debugger.interfaces.ocr import TextExtractor

log = structlog.get_logger()

BANNER = "Code Debugger Backend is running!"
INTERNAL_ERROR = "Failed to debug code due to an internal server error."
NO_IMAGE_ERROR = "No image provided for OCR."
OCR_ERROR = "Failed to extract text from image."

FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


def _error(status_code: int, error: str, details: str | None = None) -> JSONResponse:
    body: dict[str, Any] = {"error": error}
    if details is not None:
        body["details"] = details
    return JSONResponse(body, status_code=status_code)


class PayloadTooLarge(Exception):
    """The uploaded file exceeds the configured limit."""


async def _read_upload(upload: Any, limit: int) -> bytes:
    data: bytes = await upload.read(limit + 1)
    if len(data) > limit:
        raise PayloadTooLarge(f"Uploaded file exceeds {limit} bytes.")
    return data


async def read_submission(request: Request, max_upload_bytes: int) -> CodeSubmission:
    """Resolve the code submission carried by a debug request.

    Form bodies may carry a ``codeFile`` upload or ``code``/``language``
    fields; the upload wins when both are present. Any other body is read
    as JSON ``{"code": ..., "language": ...}``.

    Raises:
        InputError: If the request carries no usable code.
        PayloadTooLarge: If the upload exceeds ``max_upload_bytes``.
    """
    content_type = request.headers.get("content-type", "")

    if content_type.startswith(FORM_CONTENT_TYPES):
        form = await request.form()
        upload = form.get("codeFile")
        # Form values are either plain strings or uploaded files
        if upload is not None and not isinstance(upload, str):
            data = await _read_upload(upload, max_upload_bytes)
            return resolve_upload(upload.filename or "", data)
        code = form.get("code")
        language = form.get("language")
        return resolve_pasted(
            code if isinstance(code, str) else None,
            language if isinstance(language, str) else None,
        )

    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise InputError(NO_CODE_ERROR) from e
    if not isinstance(body, dict):
        raise InputError(NO_CODE_ERROR)

    code = body.get("code")
    language = body.get("language")
    return resolve_pasted(
        code if isinstance(code, str) else None,
        language if isinstance(language, str) else None,
    )


def _default_extractor(config: DebuggerConfig) -> TextExtractor:
    # Import here so pytesseract is only loaded when the app is built
    from code_debugger.adapters.ocr.tesseract import TesseractExtractor

    return TesseractExtractor(config.ocr)


def create_app(
    config: DebuggerConfig,
    dispatcher: AnalysisDispatcher | None = None,
    extractor: TextExtractor | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        config: Application configuration
        dispatcher: Analysis dispatcher; built from configuration if None,
            in which case its explanation provider is closed on shutdown
        extractor: OCR text extractor; Tesseract if None

    Returns:
        Configured FastAPI app
    """
    owned_augmenter = None
    if dispatcher is None:
        owned_augmenter = create_augmenter(config)
        dispatcher = create_dispatcher(config, owned_augmenter)
    if extractor is None:
        extractor = _default_extractor(config)

    checker = HealthChecker(config)
    max_upload_bytes = config.server.max_upload_bytes

    @contextlib.asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        if owned_augmenter is not None:
            await owned_augmenter.close()

    app = FastAPI(title="Code Debugger", version=__version__, lifespan=lifespan)
    app.state.config = config
    app.state.dispatcher = dispatcher
    app.state.extractor = extractor

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def bind_request(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        with request_context(request_id=uuid.uuid4().hex[:12], path=request.url.path):
            return await call_next(request)

    @app.get("/", response_class=PlainTextResponse)
    async def index() -> str:
        return BANNER

    @app.get("/health")
    async def health() -> dict[str, Any]:
        report = await checker.run_all_checks()
        return report.to_dict()

    @app.post("/api/debug")
    async def debug(request: Request) -> JSONResponse:
        try:
            submission = await read_submission(request, max_upload_bytes)
        except InputError as e:
            return _error(400, str(e))
        except PayloadTooLarge as e:
            log.warning(LogEventNames.UPLOAD_TOO_LARGE, limit=max_upload_bytes)
            return _error(413, str(e))

        bind_context(language=submission.language, source=submission.source)
        try:
            result = await dispatcher.analyze(submission.code, submission.language)
        except Exception as e:
            log.exception(LogEventNames.REQUEST_FAILED, error=str(e))
            return _error(500, INTERNAL_ERROR, str(e))

        return JSONResponse(result.to_dict())

    @app.post("/api/debug/ocr")
    async def debug_ocr(request: Request) -> JSONResponse:
        content_type = request.headers.get("content-type", "")
        image = None
        if content_type.startswith(FORM_CONTENT_TYPES):
            form = await request.form()
            image = form.get("image")
        if image is None or isinstance(image, str):
            return _error(400, NO_IMAGE_ERROR)

        try:
            data = await _read_upload(image, max_upload_bytes)
        except PayloadTooLarge as e:
            log.warning(LogEventNames.UPLOAD_TOO_LARGE, limit=max_upload_bytes)
            return _error(413, str(e))

        try:
            text = await extractor.extract_text(data)
        except OCRError as e:
            log.error(LogEventNames.OCR_FAILED, error=str(e))
            return _error(500, OCR_ERROR, str(e))

        return JSONResponse({"extractedText": text})

    return app
