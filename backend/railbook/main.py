import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv

load_dotenv()  # Load .env before any other imports that read env vars

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from railbook.config import load_settings

logger = logging.getLogger("railbook")
logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())

# Global state populated during startup
app_state: dict = {}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load settings and open the ticket store on startup."""
    from railbook.store import JsonStore

    settings = load_settings()
    app_state["settings"] = settings

    if not settings.admin_token:
        logger.warning(
            "ADMIN_TOKEN is not set, /download is disabled. "
            "Copy backend/.env.example to backend/.env to configure it."
        )

    store = JsonStore(settings.db_path)
    app_state["store"] = store
    data = store.get_all()
    logger.info(
        f"Store loaded from {settings.db_path}: "
        f"{len(data['users'])} users, {sum(len(t) for t in data['tickets'].values())} tickets"
    )

    yield

    logger.info("Shutting down...")
    app_state.clear()


app = FastAPI(title="Railbook API", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=load_settings().frontend_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

from railbook.routes import download_router, router  # noqa: E402

app.include_router(router, prefix="/api")
app.include_router(download_router)
