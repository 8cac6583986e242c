from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from sales_analytics.api.router import api_router
from sales_analytics.core.config import get_cors_origins, get_settings
from sales_analytics.core.database import Database, PostgresDatabase
from sales_analytics.core.errors import (
    AppError,
    SalesAnalysisError,
    app_error_handler,
    sales_analysis_error_handler,
    validation_error_handler,
)
from sales_analytics.core.logging import configure_logging


def create_app(database: Optional[Database] = None) -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # Only the Postgres pool has a lifecycle; in-memory doubles need none.
        owned = app.state.database if isinstance(app.state.database, PostgresDatabase) else None
        if owned is not None:
            await owned.connect()
        try:
            yield
        finally:
            if owned is not None:
                await owned.close()

    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.state.database = database or PostgresDatabase.from_settings(settings)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(api_router, prefix=settings.api_prefix)

    app.add_exception_handler(SalesAnalysisError, sales_analysis_error_handler)
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    return app


app = create_app()


def run() -> None:
    settings = get_settings()
    uvicorn.run(
        "sales_analytics.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
