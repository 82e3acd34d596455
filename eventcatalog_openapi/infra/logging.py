# eventcatalog_openapi/infra/logging.py
from __future__ import annotations
import logging
import os
from typing import Optional

_LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
_LEVELS: dict[str, int] = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}


def setup_logging(
    service_name: str = "eventcatalog-generator-openapi",
    *,
    level_name: Optional[str] = None,
    debug: bool = False,
) -> None:
    """
    Minimal, consistent structured-ish logging for generator runs.
    """
    level = _LEVELS.get((level_name or _LOG_LEVEL).upper(), logging.INFO)
    if debug:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format=(
            "%(asctime)s | %(levelname)s | %(name)s | "
            f"svc={service_name} | %(message)s"
        ),
    )
    logging.getLogger("eventcatalog_openapi").setLevel(level)
    # quiet noisy deps if needed
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
