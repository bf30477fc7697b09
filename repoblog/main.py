import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from repoblog.db.github import build_store
from repoblog.routers import admin, comments, posts
from repoblog.settings import settings

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper()),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    store = build_store(settings)
    app.state.store = store
    logger.info(f"Content store ready for {settings.REPO_OWNER}/{settings.REPO_NAME}")

    try:
        yield
    finally:
        store.close()
        logger.info("Content store closed")


app = FastAPI(
    title="repoblog API",
    description="Blog content stored in a GitHub repository",
    lifespan=lifespan,
)

app.include_router(posts.router)
app.include_router(comments.router)
app.include_router(admin.router)


@app.get("/")
async def root():
    return {"message": "repoblog API is running"}
