"""Logging setup for the CLI and the HTTP server.

Records carry their context in ``extra``; the formatter appends every
non-standard attribute as ``key=value`` so nothing passed by the ledger
is lost.
"""

from __future__ import annotations

import logging

_STANDARD_ATTRS = set(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime", "taskName"}


class ContextFormatter(logging.Formatter):

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        context = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _STANDARD_ATTRS and not key.startswith("_")
        }
        if not context:
            return base
        rendered = " ".join(f"{key}={value}" for key, value in sorted(context.items()))
        return f"{base} | {rendered}"


def configure_logging(level: str = "INFO") -> None:
    """Install a single stream handler on the ``ims`` logger (idempotent)."""
    logger = logging.getLogger("ims")
    logger.setLevel(level)
    for handler in list(logger.handlers):
        if getattr(handler, "_ims_handler", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(
        ContextFormatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    )
    handler._ims_handler = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
