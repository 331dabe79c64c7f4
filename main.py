# main.py
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from foodiebot.api.endpoints import admin, public, realtime, whatsapp
from foodiebot.core.config import settings
from foodiebot.core.database import init_db
from foodiebot.core.logging_config import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    init_db()
    logger.info("%s started (session backend: %s)", settings.PROJECT_NAME, settings.SESSION_BACKEND)
    yield


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="WhatsApp food ordering bot with an admin dashboard API",
    version="1.0",
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(whatsapp.router, tags=["WhatsApp"])
app.include_router(admin.router, prefix="/api/admin", tags=["Admin"])
app.include_router(public.router, prefix="/api", tags=["Public"])
app.include_router(realtime.router, tags=["Realtime"])


@app.get("/")
def read_root():
    return {"status": f"{settings.PROJECT_NAME} online"}


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
