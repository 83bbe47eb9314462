from .download import router as download_router

__all__ = ["download_router"]
