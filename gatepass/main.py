from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from gatepass import __version__
from gatepass.admin import router as admin_router
from gatepass.bookings import router as bookings_router
from gatepass.config import settings
from gatepass.database import create_db_and_tables
from gatepass.exceptions import register_exception_handlers
from gatepass.logging_config import setup_logging
from gatepass.payments.router import router as payments_router
from gatepass.pricing import router as pricing_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    await create_db_and_tables()
    logger.info("{} started ({})", settings.PROJECT_NAME, settings.ENVIRONMENT)
    yield
    logger.info("{} stopped", settings.PROJECT_NAME)


# Create FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    version=__version__,
    description="Event ticket booking API",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include routers
app.include_router(
    pricing_router,
    prefix=f"{settings.API_PREFIX}/public",
    tags=["Pricing"]
)

app.include_router(
    bookings_router,
    prefix=f"{settings.API_PREFIX}/public",
    tags=["Tickets"]
)

app.include_router(
    payments_router,
    prefix=f"{settings.API_PREFIX}/payment",
    tags=["Payments"]
)

app.include_router(
    admin_router,
    prefix=f"{settings.API_PREFIX}/admin",
    tags=["Admin"]
)


@app.get("/")
def root():
    """Root endpoint"""
    return {
        "message": f"{settings.PROJECT_NAME} API",
        "event": settings.EVENT_NAME,
        "version": __version__,
        "docs": "/docs"
    }


@app.get("/health")
def health_check():
    """Health check endpoint"""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
