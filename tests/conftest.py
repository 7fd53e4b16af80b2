"""Pytest configuration and fixtures for Strata tests."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import pytest

from strata import DictLoader, Environment, StaticHost

from .builders import LOOP_PRESETS, InMemoryBackend


@pytest.fixture
def env():
    """Create a basic Strata Environment."""
    return Environment()


@pytest.fixture
def env_raw():
    """Create a Strata Environment with autoescape disabled."""
    return Environment(autoescape=False)


@pytest.fixture
def host():
    return StaticHost(
        entity={"title": "Home", "slug": "home"},
        user={"name": "ada", "loggedIn": True},
        site={"name": "Demo Site", "url": "https://example.test"},
    )


@pytest.fixture
def backend():
    return InMemoryBackend()


@pytest.fixture
def env_with_loops(backend, host):
    """Create an Environment with loop presets and an in-memory backend."""
    return Environment(host=host, query_backend=backend, loop_presets=LOOP_PRESETS)


@pytest.fixture
def make_env(backend, host):
    """Factory for an Environment with patterns, presets and a backend."""

    def _make(patterns: Mapping[str, Any] | None = None, **kwargs: Any) -> Environment:
        kwargs.setdefault("host", host)
        kwargs.setdefault("query_backend", backend)
        kwargs.setdefault("loop_presets", LOOP_PRESETS)
        return Environment(loader=DictLoader(patterns or {}), **kwargs)

    return _make
