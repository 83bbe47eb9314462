import logging
from datetime import datetime, timezone
from functools import lru_cache

from fastapi import APIRouter, Body, Depends, status
from fastapi.responses import JSONResponse

from app.core.config import settings
from resolver.domain.entities.download import DownloadIn, DownloadOut, ErrorOut
from resolver.domain.entities.result import Exhausted
from resolver.domain.errors import ParseError
from resolver.services.strategy_chain import StrategyChain
from resolver.services.strategy_registry import StrategyRegistry

logger = logging.getLogger(__name__)

router = APIRouter(tags=["download"])

API_VERSION = "2.0"


@lru_cache(maxsize=1)
def get_strategy_chain() -> StrategyChain:
    # built once per process; strategies are stateless and shared across requests
    return StrategyRegistry().build_chain(settings)


def _error(status_code: int, message: str, attempts=None) -> JSONResponse:
    body = ErrorOut(message=message, attempts=attempts)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json", exclude_none=True))


def _is_instagram_post(url: str) -> bool:
    return "instagram.com/reel" in url or "instagram.com/p/" in url or "instagram.com/tv/" in url


@router.get("/", tags=["system"])
async def index():
    return {
        "message": "Instagram Reel Downloader API is running!",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": API_VERSION,
    }


@router.post(
    "/download",
    summary="Resolve a reel/post URL to a direct video URL",
    description=(
        "Runs the configured extraction strategies in order and returns the first "
        "direct media URL found.\n\n"
        "Strategies: GraphQL query, page scrape, `__a=1` data endpoint, and an optional "
        "third-party relay."
    ),
    response_model=DownloadOut,
    responses={
        400: {"model": ErrorOut, "description": "Missing or unsupported URL."},
        404: {"model": ErrorOut, "description": "No strategy found a downloadable video."},
        500: {"model": ErrorOut, "description": "Unexpected failure."},
    },
)
async def download(
    body: DownloadIn = Body(
        ...,
        examples=[{"url": "https://www.instagram.com/reel/C0dEfGhIjKl/"}],
    ),
    chain: StrategyChain = Depends(get_strategy_chain),
):
    """
    **Errors**
    - `400` – URL missing, not an Instagram reel/post, or no shortcode in it.
    - `404` – every strategy failed or found nothing; `attempts` lists why.
    - `500` – unexpected error.
    """
    url = (body.url or "").strip()
    if not url:
        return _error(status.HTTP_400_BAD_REQUEST, "URL is required")
    if not _is_instagram_post(url):
        return _error(status.HTTP_400_BAD_REQUEST, "Invalid Instagram URL. Please use a reel or post URL.")

    logger.info("Processing URL: %s", url)
    try:
        result = await chain.resolve(url)
    except ParseError as e:
        return _error(status.HTTP_400_BAD_REQUEST, str(e))
    except Exception:
        logger.exception("download failed for %s", url)
        return _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Failed to fetch reel. Please try again with a different reel.",
        )

    if isinstance(result, Exhausted):
        return _error(
            status.HTTP_404_NOT_FOUND,
            "Could not find downloadable video. The post might not be a video or Instagram changed their structure.",
            attempts=result.attempts,
        )

    return DownloadOut(download_url=result.asset_url, strategy=result.strategy)
