"""Resolvers for URL doubles."""

from collections.abc import Callable, Mapping
from typing import Any

from .errors import ConfigurationError

Resolver = Callable[..., Any]
GeneratedUrlFactory = Callable[[str], Any]


class UrlResolverBuilder:
    """Builds the resolvers of a URL double for a fixed URL string."""

    def __init__(self, url: str):
        self._url = url
        self._generated_url_factory: GeneratedUrlFactory | None = None

    @property
    def url(self) -> str:
        return self._url

    def set_generated_url_factory(self, factory: GeneratedUrlFactory) -> None:
        self._generated_url_factory = factory

    def get_resolvers(self) -> dict[str, Resolver]:
        return {"to_string": self._resolve_to_string}

    def _resolve_to_string(
        self,
        context: Mapping[str, Any],
        collect_bubbleable_metadata: bool = False,
    ) -> Any:
        """Return the URL string, or a GeneratedUrl double when collecting metadata."""
        if not collect_bubbleable_metadata:
            return self._url

        if self._generated_url_factory is None:
            raise ConfigurationError(
                "GeneratedUrl factory not set. Cannot return a GeneratedUrl from to_string(True)."
            )
        return self._generated_url_factory(self._url)

    @staticmethod
    def generated_url_resolvers(url: str) -> dict[str, Resolver]:
        """Return the resolvers of a GeneratedUrl double for ``url``."""
        return {"get_generated_url": lambda context: url}
