# route_failover/logging_config.py
"""
Logging setup for route-failover.

Every module logs through ``logging.getLogger(__name__)``. The CLI and the
server call configure_logging() once at start-up; library users may skip it
and configure the ``route_failover`` logger themselves.
"""

from __future__ import annotations

import logging
import re

_PACKAGE_LOGGER = "route_failover"
_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


class SecretMaskingFilter(logging.Filter):
    """Replaces bearer tokens and provider-style secret keys with ***."""

    KEY_PATTERN = re.compile(
        r"(?P<bearer>Bearer\s+)[^\"'\s]+"
        r"|"
        r"\bsk-[A-Za-z0-9\-_]{8,}"
    )

    def mask(self, text: str) -> str:
        def _replace(match: re.Match) -> str:  # type: ignore[type-arg]
            if match.group("bearer"):
                return f"{match.group('bearer')}***"
            return "***"

        return self.KEY_PATTERN.sub(_replace, text)

    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = self.mask(record.getMessage())
        record.args = None
        return True


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Attach a masked stream handler to the package logger. Idempotent."""
    logger = logging.getLogger(_PACKAGE_LOGGER)
    logger.setLevel(level.upper())

    if not any(getattr(h, "_route_failover", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT))
        handler.addFilter(SecretMaskingFilter())
        handler._route_failover = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    logger.propagate = False
    return logger
