"""Logging setup for catalog scrapes.

Records may carry catalog context: the configured catalog source, the
catalog location being read and the creator being scraped. Both formatters
render whichever of those a record has. ``CatalogContextFilter`` stamps the
active catalog source onto records that do not name one.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, MutableMapping, Optional, Tuple

CONTEXT_FIELDS = ("catalog", "location", "creator")


def record_context(record: logging.LogRecord) -> Dict[str, Any]:
    """Catalog context attached to a record, in CONTEXT_FIELDS order."""
    context = {}
    for name in CONTEXT_FIELDS:
        value = getattr(record, name, None)
        if value is not None:
            context[name] = value
    return context


class StructuredFormatter(logging.Formatter):
    """One JSON document per record with the catalog context as top-level keys."""

    def format(self, record: logging.LogRecord) -> str:
        document = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        document.update(record_context(record))
        if record.exc_info:
            document["exception"] = self.formatException(record.exc_info)
        return json.dumps(document, default=str)


class StandardFormatter(logging.Formatter):
    """Human-readable lines ending in a bracketed catalog context."""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def formatMessage(self, record: logging.LogRecord) -> str:
        line = super().formatMessage(record)
        context = record_context(record)
        if not context:
            return line
        tags = " ".join(f"{name}={value}" for name, value in context.items())
        return f"{line} [{tags}]"


class CatalogContextFilter(logging.Filter):
    """Tags records with the catalog source a command runs against."""

    def __init__(self, catalog: str):
        super().__init__()
        self.catalog = catalog

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "catalog", None) is None:
            record.catalog = self.catalog
        return True


def setup_logging(
    level: str = "INFO",
    structured: bool = False,
    log_file: Optional[str] = None,
    catalog: Optional[str] = None,
) -> None:
    """Set up logging configuration.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
        structured: Use structured JSON logging if True
        log_file: Optional log file path
        catalog: Name of the catalog source to tag records with
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    formatter = StructuredFormatter() if structured else StandardFormatter()

    # stderr keeps command output on stdout parseable
    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(log_level)
        if catalog:
            handler.addFilter(CatalogContextFilter(catalog))

    logging.basicConfig(level=log_level, handlers=handlers, force=True)


class CatalogLoggerAdapter(logging.LoggerAdapter):
    """Adds catalog context to every record; per-call ``extra`` wins on clashes."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        extra = dict(self.extra)
        extra.update(kwargs.get("extra") or {})
        kwargs["extra"] = extra
        return msg, kwargs


def get_catalog_logger(
    name: str,
    location: Optional[str] = None,
    creator: Optional[str] = None,
    catalog: Optional[str] = None,
) -> CatalogLoggerAdapter:
    """Logger whose records carry the given catalog context.

    Example:
        >>> log = get_catalog_logger(__name__, location="HOMEDB2E")
        >>> log.info("Alias resolved")  # record.location == "HOMEDB2E"
    """
    context = {"catalog": catalog, "location": location, "creator": creator}
    return CatalogLoggerAdapter(
        logging.getLogger(name),
        {key: value for key, value in context.items() if value is not None},
    )
