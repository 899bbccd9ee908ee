"""
FastAPI entrypoint for the TripLedger backend application.
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from tripledger.core.config import settings
from tripledger.core.logging_config import configure_logging
from tripledger.core.utils import format_error
from tripledger.api.router import api_router
from tripledger.db.session import init_db
from tripledger.services.exceptions import TripLedgerError

configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables on start-up."""
    init_db()
    yield


app = FastAPI(
    lifespan=lifespan,
    title="TripLedger API",
    description="Shared trip expenses, balances and settlements",
    version="1.0.0"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(TripLedgerError)
async def tripledger_error_handler(request: Request, exc: TripLedgerError):
    """Service errors a route did not translate itself."""
    logger.warning("Unhandled service error on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=format_error(str(exc))
    )


# Include API routes
app.include_router(api_router, prefix="/api")


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"message": f"{settings.APP_NAME} API is running"}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}
