import logging
from contextlib import asynccontextmanager

import asyncpg
import uvicorn
from fastapi import FastAPI

from players.config import Settings, get_settings
from players.middlewares.logging import LoggingMiddleware
from players.repositories.player import make_player_repository
from players.routers.player import make_player_router


# ------------------ App Factory ------------------
def create_app(settings: Settings) -> FastAPI:
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(message)s",
    )
    log = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # ---------- STARTUP ----------
        pool = await asyncpg.create_pool(
            dsn=settings.POSTGRES_DSN,
            min_size=settings.POSTGRES_POOL_MIN_SIZE,
            max_size=settings.POSTGRES_POOL_MAX_SIZE,
            max_inactive_connection_lifetime=settings.POSTGRES_POOL_MAX_IDLE,
        )
        app.state.db_pool = pool
        app.include_router(make_player_router(make_player_repository(pool)))
        log.info(
            f"[*] Connected to {settings.POSTGRES_HOST}:{settings.POSTGRES_PORT}"
            f"/{settings.POSTGRES_DB}"
        )

        try:
            yield
        finally:
            # ---------- SHUTDOWN ----------
            await pool.close()
            log.info("[*] Postgres pool closed.")

    app = FastAPI(title=settings.APP_TITLE, lifespan=lifespan)
    app.add_middleware(LoggingMiddleware)

    @app.get("/health")
    async def health():
        try:
            async with app.state.db_pool.acquire() as conn:
                await conn.execute("SELECT 1")
            return {"status": "ok"}
        except Exception:
            log.exception("Health check failed")
            return {"status": "fail"}

    return app


# ------------------ Uvicorn Runner ------------------
def run_uvicorn(app: FastAPI, settings: Settings):
    log = logging.getLogger(__name__)
    log.info(f"Server running at http://localhost:{settings.PORT}")
    uvicorn.run(
        app,
        host=settings.APP_HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


# ------------------ Main ------------------
def main():
    settings = get_settings()
    app = create_app(settings)
    run_uvicorn(app, settings)


if __name__ == "__main__":
    main()
