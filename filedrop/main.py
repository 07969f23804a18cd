"""FastAPI application entrypoint. No business logic; only wiring, bootstrap and middleware."""

from contextlib import asynccontextmanager

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from filedrop.api.v1 import router as v1_router
from filedrop.core.config import settings
from filedrop.core.database import engine
from filedrop.services.schema import ensure_schema


@asynccontextmanager
async def lifespan(_app: FastAPI):
    # SchemaError propagates and aborts startup; never serve on a broken schema.
    ensure_schema(engine)
    yield
    engine.dispose()


app = FastAPI(
    title="filedrop API",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.APP_ENV == "dev" else [],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(v1_router, prefix=settings.API_V1_PREFIX)


@app.get("/")
def root() -> dict[str, str]:
    """Root route; minimal payload for discovery."""
    return {"message": "filedrop API"}
