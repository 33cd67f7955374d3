from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from app.config import get_settings
from app.database import init_db
from app.log import get_logger, request_ctx, setup_logging
from app.routers import missions_router, tutorials_router, progress_router, cron_router

setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle"""
    logger.info("event=app.startup | msg=initializing database")
    init_db()
    logger.info("event=app.startup | msg=database ready")

    yield

    logger.info("event=app.shutdown")


settings = get_settings()

app = FastAPI(
    title="Mission Coach",
    description="Daily social-media missions, streaks and badges for restaurant owners",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    """Tag every log line of a request with its X-Request-ID"""
    with request_ctx(request.headers.get("X-Request-ID")) as request_id:
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


app.include_router(missions_router)
app.include_router(tutorials_router)
app.include_router(progress_router)
app.include_router(cron_router)


@app.get("/health")
async def health():
    """Health check"""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug
    )
