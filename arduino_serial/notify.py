from __future__ import annotations

import logging
from typing import Callable

_logger = logging.getLogger(__name__)

# notify(title, message), called once when opening the port fails
Notifier = Callable[[str, str], None]


def log_notifier(title: str, message: str) -> None:
    """Default notifier: report the failure through logging."""
    _logger.error("%s: %s", title, message)
