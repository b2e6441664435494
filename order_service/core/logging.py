from __future__ import annotations

import logging

from order_service.core.config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_HANDLER_NAME = "order_service"


def configure_logging(level: str | None = None) -> None:
    root = logging.getLogger()
    resolved = (level or get_settings().log_level).upper()
    root.setLevel(resolved)

    if any(handler.get_name() == _HANDLER_NAME for handler in root.handlers):
        return

    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
