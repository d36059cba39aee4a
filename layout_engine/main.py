from __future__ import annotations

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException

from layout_engine import __version__
from layout_engine.api.routes import generate_course_layout
from layout_engine.config import get_settings
from layout_engine.core.exceptions import global_exception_handler, http_exception_handler, layout_generation_exception_handler, request_validation_exception_handler
from layout_engine.core.lifespan import lifespan
from layout_engine.core.middleware import RequestLoggingMiddleware
from layout_engine.services.layout import LayoutGenerationError

settings = get_settings()

app = FastAPI(title="Course Layout Engine", version=__version__, lifespan=lifespan)

app.add_middleware(CORSMiddleware, allow_origins=list(settings.allowed_origins), allow_credentials=True, allow_methods=["GET", "POST", "OPTIONS"], allow_headers=["content-type"], expose_headers=["x-request-id"])

# Add exception handlers
app.add_exception_handler(Exception, global_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(LayoutGenerationError, layout_generation_exception_handler)
app.add_exception_handler(RequestValidationError, request_validation_exception_handler)

# Add middleware
app.add_middleware(RequestLoggingMiddleware)


@app.get("/health", include_in_schema=False)
async def health_check() -> dict[str, str]:
  """Return a simple health status."""
  return {"status": "ok", "version": __version__}


app.include_router(generate_course_layout.router, prefix="/api/generate-course-layout", tags=["course-layout"])
