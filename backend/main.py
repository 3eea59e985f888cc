import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.config import settings
from core.errors import (
    ERROR_CODES,
    SquareApiError,
    SquareConfigError,
    code_for_status,
    error_envelope,
)
from core.logging_config import setup_logging
from core.square_client import square_client
from routers.catalog import router as catalog_router
from routers.categories import router as categories_router
from routers.inventory import router as inventory_router
from routers.locations import router as locations_router
from routers.vendors import router as vendors_router
from schemas.common import ApiErrorResponse

logger = logging.getLogger(__name__)

ERROR_RESPONSES = {code: {"model": ApiErrorResponse} for code in (400, 401, 404, 429, 500)}


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings.log_level)
    if not settings.square_access_token:
        logger.warning("SQUARE_ACCESS_TOKEN is not set; Square calls will fail until it is configured")
    yield
    square_client.session.close()


app = FastAPI(
    title="Storefront Inventory API",
    description="Catalog, inventory and vendor data from Square, shaped for the inventory dashboard",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.cors_origins.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SquareConfigError)
async def square_config_error_handler(request: Request, exc: SquareConfigError):
    logger.error("Square client misconfigured: %s", exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_envelope(exc.code, str(exc)),
    )


@app.exception_handler(SquareApiError)
async def square_api_error_handler(request: Request, exc: SquareApiError):
    logger.warning("Square API error on %s %s: %s %s", request.method, request.url.path, exc.status_code, exc)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(exc.code, str(exc), exc.errors or None),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_envelope(
            ERROR_CODES["INVALID_REQUEST"],
            "Invalid request body",
            jsonable_encoder(exc.errors()),
        ),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(code_for_status(exc.status_code), str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_envelope(ERROR_CODES["UNHANDLED_ERROR"], str(exc) or "An unexpected error occurred"),
    )


@app.get("/health", tags=["health"])
def health():
    return {"status": "ok"}


# Catalog routes
app.include_router(catalog_router, prefix="/catalog", tags=["catalog"], responses=ERROR_RESPONSES)
app.include_router(categories_router, prefix="/categories", tags=["categories"], responses=ERROR_RESPONSES)

# Inventory routes
app.include_router(inventory_router, prefix="/inventory", tags=["inventory"], responses=ERROR_RESPONSES)
app.include_router(locations_router, prefix="/locations", tags=["locations"], responses=ERROR_RESPONSES)

# Vendor routes
app.include_router(vendors_router, prefix="/vendors", tags=["vendors"], responses=ERROR_RESPONSES)

if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
