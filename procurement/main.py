import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from procurement.config import Settings, settings as default_settings
from procurement.database import Database
from procurement.errors import AppError
from procurement.guardrails.rate_limiter import SlidingWindowRateLimiter
from procurement.api import auth, items, purchase_orders, suppliers

# Setup Logging
logging.basicConfig(level=default_settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI):

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = jsonable_encoder(exc.errors())
        first = errors[0] if errors else {}
        field = ".".join(str(part) for part in first.get("loc", []) if part != "body")
        message = f"{field}: {first.get('msg')}" if field else first.get("msg", "Invalid request")
        return JSONResponse(status_code=400, content={"message": message, "errors": errors})

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"message": str(exc.detail)},
                            headers=getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(status_code=500, content={"message": "Internal server error"})


def create_app(settings: Settings = default_settings, database: Optional[Database] = None) -> FastAPI:
    """
    Build the API. When ``database`` is given it is used as-is and never
    connected or closed by the app; otherwise one is opened for the app's lifetime.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = database is None
        if owned:
            app.state.db = Database(settings)
            app.state.db.connect()
        yield
        if owned:
            app.state.db.close()

    app = FastAPI(
        title="Purchase Order API",
        description="Suppliers, inventory items and purchase orders",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.login_limiter = SlidingWindowRateLimiter(
        settings.LOGIN_RATE_LIMIT, settings.LOGIN_RATE_WINDOW_SECONDS
    )
    if database is not None:
        app.state.db = database

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Router Registration
    app.include_router(auth.router)
    app.include_router(items.router)
    app.include_router(suppliers.router)
    app.include_router(purchase_orders.router)

    # Health Check
    @app.get("/health")
    async def health_check():
        return {"status": "ok", "environment": settings.ENVIRONMENT}

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run("procurement.main:app", host="0.0.0.0", port=8000, reload=True)
