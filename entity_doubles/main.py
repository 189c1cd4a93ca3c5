"""Composition root for entity doubles.

This module is the ONLY location that imports both core logic and
concrete back-end implementations. Test suites obtain a ready factory
here:

    from entity_doubles.main import create_factory

    factory = create_factory()
    entity = factory.create(definition)
"""

import logging
import sys

from entity_doubles.adapters.backend.fake import FakeDoubleBackend
from entity_doubles.adapters.backend.mock import MockDoubleBackend
from entity_doubles.config import Settings, load_settings
from entity_doubles.core.factory import EntityDoubleFactory
from entity_doubles.core.ports import DoubleBackendPort

logger = logging.getLogger(__name__)


def configure_logging(log_level: str, log_format: str) -> None:
    """Configure logging for the entity_doubles package.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_format: Log format (json, text).
    """
    level = getattr(logging, log_level, logging.WARNING)

    if log_format == "json":
        format_str = '{"time": "%(asctime)s", "level": "%(levelname)s", "message": "%(message)s"}'
    else:
        format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # Configure the package logger only; the test runner owns the root.
    package_logger = logging.getLogger("entity_doubles")
    package_logger.setLevel(level)
    if not package_logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(format_str))
        package_logger.addHandler(handler)


def create_backend(name: str) -> DoubleBackendPort:
    """Instantiate the back-end selected by name.

    Raises:
        ValueError: If the name is not a known back-end.
    """
    if name == "mock":
        return MockDoubleBackend()
    if name == "fake":
        return FakeDoubleBackend()
    raise ValueError(f"Unsupported backend: {name}")


def create_factory(
    settings: Settings | None = None,
    backend: DoubleBackendPort | None = None,
) -> EntityDoubleFactory:
    """Wire a back-end into an EntityDoubleFactory.

    Args:
        settings: Settings to use; loaded from the environment if omitted.
        backend: Back-end to use instead of the configured one.

    Returns:
        A ready factory.
    """
    if settings is None:
        settings = load_settings()

    if backend is None:
        backend = create_backend(settings.backend)

    logger.debug(
        f"Creating entity double factory with {type(backend).__name__}",
        extra={"lenient_by_default": settings.lenient_by_default},
    )
    return EntityDoubleFactory(backend, lenient_by_default=settings.lenient_by_default)
