import logging
from typing import Optional
import uvicorn
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from scamguard.advertisement.router import router as advertisement_router
from scamguard.authentication import security
from scamguard.authentication.router import router as auth_router
from scamguard.authentication.schemas import Session
from scamguard.comments.router import router as comments_router
from scamguard.core.config import settings
from scamguard.core.errors import install_error_handlers
from scamguard.reports.router import router as reports_router
from scamguard.users.router import router as users_router

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("scamguard")


def _log_session_change(event: str, session: Optional[Session]) -> None:
    if session is not None:
        logger.info("%s user=%s", event, session.user_id)


app = FastAPI(title=settings.APP_NAME)
install_error_handlers(app)

app.include_router(auth_router)
app.include_router(reports_router)
app.include_router(comments_router)
app.include_router(users_router)
app.include_router(advertisement_router)

app.mount("/blobs", StaticFiles(directory=settings.BLOB_DIR, check_dir=False), name="blobs")

security.on_session_change(_log_session_change)


@app.get("/health")
def health():
    return {"ok": True}


def run():
    uvicorn.run("scamguard.main:app", host="0.0.0.0", port=8000)


if __name__ == "__main__":
    run()
