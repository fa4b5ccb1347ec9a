import logging
import os
import traceback

from fastapi import APIRouter, FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from mangum import Mangum

from app.api.routes import admin, health, numbers, purchases
from app.core.config import settings
from app.core.errors import RaffleError
from app.core.logging import configure_logging

configure_logging()
logger = logging.getLogger(__name__)

API_PREFIX = "/api"
api_gateway_base_path = os.getenv("API_GATEWAY_BASE_PATH", "").strip()
if api_gateway_base_path and not api_gateway_base_path.startswith("/"):
    api_gateway_base_path = f"/{api_gateway_base_path}"

app = FastAPI(
    title="Rifa Numbers API",
    version="1.0.0",
    docs_url=f"{API_PREFIX}/docs",
    redoc_url=f"{API_PREFIX}/redoc",
    openapi_url=f"{API_PREFIX}/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=False,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

api_router = APIRouter(prefix=API_PREFIX)
api_router.include_router(health.router)
api_router.include_router(numbers.router)
api_router.include_router(purchases.router)
api_router.include_router(admin.router)
app.include_router(api_router)


@app.exception_handler(RaffleError)
def raffle_error_handler(_: Request, exc: RaffleError):
    return JSONResponse(status_code=exc.status_code, content=exc.payload())


@app.exception_handler(HTTPException)
def http_exception_handler(_: Request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail, "type": "http_error"},
    )


@app.exception_handler(RequestValidationError)
def validation_exception_handler(_: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=422,
        content={
            "error": "Validation error",
            "detail": jsonable_encoder(exc.errors()),
            "type": "validation_error",
        },
    )


@app.exception_handler(Exception)
def unhandled_exception_handler(_: Request, exc: Exception):
    logger.exception("Unhandled error")
    if settings.expose_errors:
        detail = {
            "type": exc.__class__.__name__,
            "message": str(exc) or "Unhandled error",
            "trace": traceback.format_exc(),
        }
    else:
        detail = "Internal Server Error"
    return JSONResponse(
        status_code=500,
        content={"error": "Internal Server Error", "detail": detail, "type": "server_error"},
    )


handler = Mangum(app, api_gateway_base_path=api_gateway_base_path or None)
