import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from chalkboard.config import settings
from chalkboard.database import init_db
from chalkboard.errors import TutorError
from chalkboard.routes import teach

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Create SQLite tables on startup. Nothing to tear down on shutdown."""
    await init_db()
    yield


app = FastAPI(
    title="chalkboard",
    description="One-to-one AI tutor that narrates while writing on a chalkboard",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["POST"],
    allow_headers=["Content-Type"],
)

app.include_router(teach.router)


@app.exception_handler(TutorError)
async def tutor_error_handler(_request: Request, exc: TutorError) -> JSONResponse:
    """Every pipeline failure reaches the client as ``{"error": message}``."""
    if exc.status_code >= 500:
        logger.error("Request failed: %s", exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


def serve() -> None:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    serve()
