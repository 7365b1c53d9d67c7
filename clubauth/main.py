"""
Main FastAPI application entry point.
Configures the application, middleware, and includes routers.
"""
from dotenv import load_dotenv

# Load environment variables from .env file first
load_dotenv()

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from . import __version__
from .auth.router import router as auth_router
from .database import Base, engine
from .exceptions import register_exception_handlers
from .core.middleware import setup_middlewares
from .students.models import Student  # noqa: F401  registers the students table

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """
    Create the students table if it does not exist yet.

    Student records themselves are imported by the institution.
    """
    logger.info("Starting Club Auth API...")
    Base.metadata.create_all(bind=engine)
    yield
    logger.info("Shutting down Club Auth API...")


# Create FastAPI application
app = FastAPI(
    title="Club Auth API",
    description="Student enrollment verification, signup and login for the club portal",
    version=__version__,
    lifespan=lifespan,
)

# Register exception handlers
register_exception_handlers(app)

# Configure CORS middleware
origins = [
    "http://localhost:3000",  # Frontend development server
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Setup custom middleware
setup_middlewares(app)

# Include routers
app.include_router(auth_router)

# Root endpoint
@app.get("/")
def root():
    """
    Root endpoint for API health check.

    Returns:
        dict: Simple welcome message
    """
    return {"message": "Welcome to Club Auth API", "version": __version__}

# Health check endpoint
@app.get("/health")
async def health_check():
    """
    Health check endpoint for monitoring.

    Returns:
        dict: Health status information
    """
    return {"status": "healthy"}
