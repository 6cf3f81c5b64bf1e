"""
ReWear API application entry point

Run from the ``backend`` directory::

    uvicorn rewear.main:app --reload
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import settings
from .core.exceptions import MarketplaceError
from .core.logging import get_logger, setup_logging
from .routes import ai, items, ratings, redemptions, swaps, users

setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.app_name}...")
    yield
    logger.info(f"Shutting down {settings.app_name}...")


app = FastAPI(
    title=settings.app_name,
    description="Clothing exchange marketplace: listings, swaps, points redemptions and ratings",
    version="1.0.0",
    debug=settings.debug,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(MarketplaceError)
async def marketplace_error_handler(request: Request, exc: MarketplaceError):
    """Domain errors carry their own HTTP status and a machine-readable code"""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.detail}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


app.include_router(items.router, prefix="/api/items", tags=["items"])
app.include_router(swaps.router, prefix="/api/swaps", tags=["swaps"])
app.include_router(redemptions.router, prefix="/api/redemptions", tags=["redemptions"])
app.include_router(ratings.router, prefix="/api/ratings", tags=["ratings"])
app.include_router(users.router, prefix="/api/users", tags=["users"])
app.include_router(ai.router, prefix="/api/ai", tags=["ai"])


@app.get("/")
def root():
    return {"message": f"{settings.app_name} is running"}


@app.get("/health")
def health():
    return {"status": "ok"}
