import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import get_cors_origins, get_database_url
from app.core.errors import AppError
from app.core.logging_config import setup_logging
from app.database.connection import ConnectionManager
from app.routes import bookings, events, images

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    app.state.connections.dispose()


app = FastAPI(title="Dev Events API", lifespan=lifespan)

# The connection is opened lazily on the first request that needs it
app.state.connections = ConnectionManager(get_database_url(), pool_pre_ping=True)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_cors_origins(),
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message, "error": exc.code})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"message": str(exc.detail), "error": None})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    fields = [".".join(str(p) for p in err["loc"] if p != "body") for err in exc.errors()]
    return JSONResponse(
        status_code=400,
        content={"message": f"Invalid request: {', '.join(fields)}", "error": "validation_error"},
    )


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"message": f"Internal error: {exc}", "error": "internal_error"})


@app.get("/health")
def health_check():
    return {"status": "ok"}


# Include the routers
app.include_router(events.router)
app.include_router(bookings.router)
app.include_router(images.router)
