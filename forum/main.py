import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError

from forum.cache import cache
from forum.config import settings
from forum.database import async_session
from forum.middleware import TimingMiddleware
from forum.routers import auth, categories, comment_likes, comments, post_likes, posts, roles, users
from forum.seed import seed_roles, seed_users

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


async def seed_defaults() -> None:
    async with async_session() as session:
        await seed_roles(session)
        await seed_users(session)
        await session.commit()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    await cache.connect()  # App works without Redis
    if settings.SEED_ON_STARTUP:
        try:
            await seed_defaults()
        except SQLAlchemyError:
            # Tables may not exist yet (migrations not applied)
            logger.exception("Seeding roles and default users failed")
    yield
    # Shutdown
    await cache.disconnect()

app = FastAPI(
    title="Forum API",
    description="Categories, threaded discussions, reactions and user accounts",
    version="1.0.0",
    lifespan=lifespan,
)

# Middleware
app.add_middleware(TimingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Uploaded profile images
app.mount(settings.MEDIA_URL, StaticFiles(directory=settings.MEDIA_ROOT, check_dir=False), name="media")

# Routers
app.include_router(auth.router)
app.include_router(categories.router)
app.include_router(posts.router)
app.include_router(comments.router)
app.include_router(post_likes.router)
app.include_router(comment_likes.router)
app.include_router(roles.router)
app.include_router(users.router)

@app.get("/health")
async def health():
    return {"status": "healthy", "version": "1.0.0"}
