"""Host collaborators that supply the global context.

The engine does not know where the current entity, user or site data come
from. A host implements :class:`HostContext`; each method returns a mapping,
or ``None`` when there is nothing to expose (no logged-in user, not a
taxonomy page, ...). ``None`` leaves the root key absent.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

DEFAULT_ENVIRONMENT: Mapping[str, Any] = {"current": "frontend"}

# Root key -> HostContext method, in global-context order
GLOBAL_KEYS: tuple[tuple[str, str], ...] = (
    ("this", "current_entity"),
    ("user", "current_user"),
    ("site", "site"),
    ("url", "url"),
    ("options", "options"),
    ("archive", "archive"),
    ("environment", "environment"),
    ("term", "term"),
    ("taxonomy", "taxonomy"),
)


@runtime_checkable
class HostContext(Protocol):
    """Per-request data supplied by the hosting content system."""

    def current_entity(self) -> Mapping[str, Any] | None: ...

    def current_user(self) -> Mapping[str, Any] | None: ...

    def site(self) -> Mapping[str, Any] | None: ...

    def url(self) -> Mapping[str, Any] | None: ...

    def options(self) -> Mapping[str, Any] | None: ...

    def archive(self) -> Mapping[str, Any] | None: ...

    def environment(self) -> Mapping[str, Any] | None: ...

    def term(self) -> Mapping[str, Any] | None: ...

    def taxonomy(self) -> Mapping[str, Any] | None: ...


class StaticHost:
    """HostContext backed by fixed values; the default host and a test double.

    Example:
        >>> host = StaticHost(entity={"title": "Home"}, site={"name": "Demo"})
        >>> build_global_context(host)["this"]
        {'title': 'Home'}
    """

    def __init__(
        self,
        *,
        entity: Mapping[str, Any] | None = None,
        user: Mapping[str, Any] | None = None,
        site: Mapping[str, Any] | None = None,
        url: Mapping[str, Any] | None = None,
        options: Mapping[str, Any] | None = None,
        archive: Mapping[str, Any] | None = None,
        environment: Mapping[str, Any] | None = None,
        term: Mapping[str, Any] | None = None,
        taxonomy: Mapping[str, Any] | None = None,
    ):
        self.entity = entity
        self.user = user
        self.site_data = site
        self.url_data = url
        self.options_data = options
        self.archive_data = archive
        self.environment_data = environment
        self.term_data = term
        self.taxonomy_data = taxonomy

    def current_entity(self) -> Mapping[str, Any] | None:
        return self.entity

    def current_user(self) -> Mapping[str, Any] | None:
        return self.user

    def site(self) -> Mapping[str, Any] | None:
        return self.site_data

    def url(self) -> Mapping[str, Any] | None:
        return self.url_data

    def options(self) -> Mapping[str, Any] | None:
        return self.options_data

    def archive(self) -> Mapping[str, Any] | None:
        return self.archive_data

    def environment(self) -> Mapping[str, Any] | None:
        return self.environment_data if self.environment_data is not None else DEFAULT_ENVIRONMENT

    def term(self) -> Mapping[str, Any] | None:
        return self.term_data

    def taxonomy(self) -> Mapping[str, Any] | None:
        # Term and taxonomy are only exposed together
        return self.taxonomy_data if self.term_data is not None else None


def build_global_context(host: HostContext | None) -> dict[str, Any]:
    """Collect the host's per-request data under the global root keys."""
    if host is None:
        return {"environment": dict(DEFAULT_ENVIRONMENT)}
    context: dict[str, Any] = {}
    for key, method in GLOBAL_KEYS:
        value = getattr(host, method)()
        if value is None and key == "environment":
            value = DEFAULT_ENVIRONMENT
        if value is not None:
            context[key] = value
    if "term" not in context:
        context.pop("taxonomy", None)
    return context
