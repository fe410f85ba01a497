from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from .config import get_settings
from .errors import ConfigError, MarksLookupError
from .log import get_logger, setup_logging
from .routes import marks as marks_routes


setup_logging()
logger = get_logger()

app = FastAPI(title="Marks Lookup")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def apply_log_level():
    # Configuration problems are reported per request, not at boot.
    try:
        setup_logging(get_settings().log_level)
    except ConfigError as e:
        logger.warning("Settings not loaded at startup: %s", e)


@app.exception_handler(MarksLookupError)
async def handle_marks_lookup_error(request: Request, exc: MarksLookupError):
    if exc.status_code >= 500:
        logger.error("%s on %s: %s", type(exc).__name__, request.url.path, exc)
    else:
        logger.info("%s on %s: %s", type(exc).__name__, request.url.path, exc)

    if exc.detail is None:
        return Response(status_code=exc.status_code)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.get("/api/health")
def health_check():
    return {"status": "ok"}


app.include_router(marks_routes.router, prefix="/marks", tags=["marks"])
