# app/main.py
import logging
import os
import time

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.modules.router import router as modules_router
from core.config import settings, wire_services
from core.logging import get_logger

logger = get_logger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(title=settings.PROJECT_NAME, version="1.0.0")
    wire_services(app)
    app.include_router(modules_router)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start_time = time.time()
        logger.info(f"➡️ Incoming request: {request.method} {request.url.path}")
        response = await call_next(request)
        process_time = (time.time() - start_time) * 1000
        logger.info(f"⬅️ Response status: {response.status_code} | Time: {process_time:.2f}ms")
        return response

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Status-Text"],
    )

    @app.api_route("/healthz", methods=["GET", "HEAD"], include_in_schema=False)
    async def healthz():
        return JSONResponse({"status": "ok"})

    @app.on_event("startup")
    async def startup_event():
        """Application startup event handler."""
        logger.info(f"Starting {settings.PROJECT_NAME} API...")

        from app.services.memory.init_db import init_database

        logger.info("Initializing chat history database...")
        if not await init_database():
            logger.warning("Chat history features may not work properly")

        logger.info("Application startup completed successfully")

    for route in app.routes:
        logging.getLogger("router.map").info(
            "ROUTE %s %s", ",".join(sorted(getattr(route, "methods", None) or [])), route.path
        )

    return app


app = create_app()


if __name__ == "__main__":
    port = int(os.environ.get("PORT", 8000))
    uvicorn.run("app.main:app", host="0.0.0.0", port=port)
