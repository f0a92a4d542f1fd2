"""
Process-wide logging setup.

Modules log through ``logging.getLogger(__name__)``; only the entry point
calls :func:`configure_logging`.
"""
import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Attach a single stream handler to the root logger at *level*."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    for handler in root.handlers:
        if getattr(handler, "_mrp_handler", False):
            return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._mrp_handler = True  # type: ignore[attr-defined]
    root.addHandler(handler)
