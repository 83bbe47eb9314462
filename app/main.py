import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.core.logging import configure_logging

# Routers
from resolver.routers import download_router
from resolver.routers.download import get_strategy_chain

configure_logging(settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: build the chain eagerly so a bad strategy_order fails the boot, not a request
    chain = get_strategy_chain()
    logger.info("strategy chain: %s", " -> ".join(s.name for s in chain.strategies))
    yield


app = FastAPI(
    title=settings.app_name,
    version="2.0.0",
    debug=settings.debug,
    docs_url="/docs",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "0",
    "Referrer-Policy": "no-referrer",
    "Strict-Transport-Security": "max-age=15552000; includeSubDomains",
    "Cross-Origin-Resource-Policy": "same-origin",
}


# Configure security headers middleware
@app.middleware("http")
async def add_security_headers(request, call_next):
    response = await call_next(request)
    for name, value in SECURITY_HEADERS.items():
        response.headers.setdefault(name, value)
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health", tags=["system"])
async def health():
    return {"status": "ok"}


app.include_router(download_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host=settings.app_host, port=settings.app_port)
