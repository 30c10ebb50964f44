from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException
from .api.api import api_router
from .core.config import get_settings
from .core.errors import BlogError, StorageError
from .db.database import create_tables, get_session_maker
from .services.sweeper import ExpirySweeper
import logging
import json
import traceback

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger("fastapi")

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    # make sure tables are created
    create_tables()
    sweeper = None
    if settings.sweeper_enabled:
        sweeper = ExpirySweeper(get_session_maker())
        sweeper.start()
    yield
    if sweeper is not None:
        sweeper.shutdown()

app = FastAPI(title="Blog API", lifespan=lifespan)

# request fields never written to the log or echoed in validation errors
REDACTED_FIELDS = {"password"}


def _redact(value):
    if isinstance(value, dict):
        return {key: "***" if key in REDACTED_FIELDS else _redact(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_redact(item) for item in value]
    return value


def _loggable_body(body: bytes):
    if not body:
        return None
    text = body.decode(errors="replace")
    try:
        return _redact(json.loads(text))
    except ValueError:
        return text


def error_response(status_code: int, message: str, details=None, headers=None) -> JSONResponse:
    error = {"message": message}
    if details is not None:
        error["details"] = details
    return JSONResponse(
        status_code=status_code,
        content={"status": "error", "error": error},
        headers=headers,
    )


@app.exception_handler(BlogError)
async def blog_error_handler(request: Request, exc: BlogError):
    if isinstance(exc, StorageError):
        logger.error(f"Storage failure on {request.method} {request.url.path}: {exc.__cause__}")
    return error_response(exc.status_code, exc.message, exc.details)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = jsonable_encoder(exc.errors())
    for error in errors:
        if error.get("loc") and error["loc"][-1] in REDACTED_FIELDS and "input" in error:
            error["input"] = "***"
    return error_response(422, "Validation failed", _redact(errors))


@app.middleware("http")
async def log_requests(request: Request, call_next):
    body = await request.body()
    request_info = {
        "url": str(request.url),
        "method": request.method,
        "body": _loggable_body(body),
        "path_params": request.path_params,
        "query_params": dict(request.query_params)
    }

    try:
        # execute the request
        response = await call_next(request)

        if response.status_code >= 400:
            response_body = b""
            async for chunk in response.body_iterator:
                response_body += chunk

            logger.warning(
                f"Request failed with status {response.status_code}\n"
                f"Request: {json.dumps(request_info, indent=2)}\n"
                f"Response: {response_body.decode(errors='replace')}\n"
            )
            return Response(
                content=response_body,
                status_code=response.status_code,
                headers=dict(response.headers),
                media_type=response.media_type
            )

        return response

    except Exception as e:
        logger.error(
            f"Request failed with exception\n"
            f"Request: {json.dumps(request_info, indent=2)}\n"
            f"Error: {str(e)}\n"
            f"Traceback: {traceback.format_exc()}"
        )
        raise

# register the API router
app.include_router(api_router, prefix="/api")
