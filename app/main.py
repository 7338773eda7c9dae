from fastapi import FastAPI, Depends
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from sqlalchemy import text

from app.db.base import get_db
from app.core.config import settings
from app.core.logging import setup_logging
from app.routers import profiles as profiles_router
from app.routers import bets as bets_router
from app.routers import shop as shop_router
from app.routers import wall as wall_router
from app.routers import cron as cron_router
from app.routers import buddy_email as buddy_email_router
from app.core.errors import (
    BetOnYouException,
    betonyou_exception_handler,
    validation_exception_handler,
    unhandled_exception_handler,
)

setup_logging(settings)

app = FastAPI(
    title="Bet On Yourself API",
    description=(
        "**Habit commitment bets with Gold Coins (GC)**\n\n"
        "Stake coins on a weekly habit, check in every week, win "
        "`stake × weeks` or forfeit the stake. Friends can co-stake, and "
        "a public wall announces every bet's lifecycle.\n\n"
        "All error responses follow the `{code, message, error, details}` envelope."
    ),
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# --- CORS ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Exception handlers (most specific first) ---
app.add_exception_handler(BetOnYouException, betonyou_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

# --- Routers ---
app.include_router(profiles_router.router)
app.include_router(bets_router.router)
app.include_router(shop_router.router)
app.include_router(wall_router.router)
app.include_router(cron_router.router)
app.include_router(buddy_email_router.router)


@app.get("/health", tags=["health"], summary="Health check")
def health(db: Session = Depends(get_db)):
    """
    Returns `{"status": "ok", "db": "ok"}` when both the API and the database
    are reachable. Returns HTTP 503 if the DB is down.
    """
    try:
        db.execute(text("SELECT 1"))
        db_status = "ok"
    except Exception:
        db_status = "unreachable"

    if db_status != "ok":
        return JSONResponse(
            status_code=503,
            content={"status": "error", "db": db_status},
        )
    return {"status": "ok", "db": "ok", "env": settings.APP_ENV}
