import logging
import sys

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Chatty per-request loggers from the HTTP stack
_NOISY_LOGGERS = ("httpx", "httpcore")


def configure_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    root.setLevel(level.upper())

    # idempotent: uvicorn reloads and tests may call this more than once
    if not any(getattr(h, "_reel_resolver", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_FORMAT))
        handler._reel_resolver = True  # type: ignore[attr-defined]
        root.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
