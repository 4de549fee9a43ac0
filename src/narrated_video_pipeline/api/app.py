from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..config import get_settings
from .routers import narration as narration_router
from .routers import processing as processing_router
from .routers import system as system_router


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = sorted({".".join(str(part) for part in error["loc"][1:]) or "body" for error in exc.errors()})
    return JSONResponse(
        status_code=400,
        content={
            "error": "Missing or invalid parameters",
            "details": f"Invalid fields: {', '.join(fields)}",
            "code": "InvalidInputError",
            "retryable": False,
        },
    )


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="Narrated Video Pipeline", version=__version__)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(RequestValidationError, _validation_error_handler)

    app.include_router(system_router.router)
    app.include_router(processing_router.router)
    app.include_router(narration_router.router)
    return app


app = create_app()
