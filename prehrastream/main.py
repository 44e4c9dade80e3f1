import time
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from prehrastream.api.routes import router
from prehrastream.config.settings import settings
from prehrastream.scrapers.prehrajto.premium import close_premium_session
from prehrastream.utils.http_client import http_client
from prehrastream.utils.logger import setup_logger, addon_logger, api_logger


# ===========================
# Logger Setup
# ===========================
setup_logger(settings.LOG_LEVEL)


# ===========================
# Custom Middleware
# ===========================
class LoguruMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        try:
            response = await call_next(request)
        except Exception as e:
            api_logger.error(f"Exception: {type(e).__name__}")
            raise
        finally:
            process_time = time.time() - start_time
            if request.url.path != "/health":
                api_logger.debug(f"{request.method} {request.url.path} - {response.status_code if 'response' in locals() else '500'} - {process_time:.2f}s")
        return response


# ===========================
# Application Lifecycle
# ===========================
@asynccontextmanager
async def lifespan(app: FastAPI):
    use_database = settings.CACHE_BACKEND == "database"
    if use_database:
        from prehrastream.utils.database import setup_database
        await setup_database()

    yield

    await http_client.close()
    await close_premium_session()

    if use_database:
        from prehrastream.utils.database import teardown_database
        await teardown_database()


# ===========================
# FastAPI Application Setup
# ===========================
app = FastAPI(
    title=settings.ADDON_NAME,
    version=settings.ADDON_MANIFEST["version"],
    lifespan=lifespan
)

app.add_middleware(LoguruMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)


# ===========================
# Application Entry Point
# ===========================
def run():
    if not settings.TMDB_API_KEY:
        addon_logger.error("TMDB_API_KEY is not configured!")
        addon_logger.error("The addon will not be able to resolve any title")

    addon_logger.info(f"Starting {settings.ADDON_NAME} v{settings.ADDON_MANIFEST['version']} ({settings.ADDON_ID})")
    addon_logger.info(f"Server: http://localhost:{settings.PORT}/manifest.json")
    addon_logger.info(f"Source: {settings.PREHRAJTO_URL}")
    addon_logger.info(f"Premium: {'enabled' if settings.has_premium_credentials else 'disabled'}")
    addon_logger.info(f"Cache: {settings.CACHE_BACKEND} ({settings.CONTENT_CACHE_TTL}s)")
    addon_logger.info(f"Proxy: {'enabled' if settings.PROXY_URL else 'disabled'}")
    addon_logger.info(f"Log level: {settings.LOG_LEVEL}")

    uvicorn.run(
        app,
        host="0.0.0.0",
        port=settings.PORT,
        log_config=None
    )


if __name__ == "__main__":
    run()
