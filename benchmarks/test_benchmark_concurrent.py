"""Concurrent rendering benchmarks.

Every render owns its RenderSession, so renders on a shared Environment
scale with threads on free-threaded Python and stay correct on any build.

Run with: pytest benchmarks/test_benchmark_concurrent.py --benchmark-only -v
"""

from __future__ import annotations

import sys
from concurrent.futures import ThreadPoolExecutor

import pytest
from pytest_benchmark.fixture import BenchmarkFixture

from benchmarks.fixtures.trees import article_list
from strata import Environment, blocks_from

BLOCKS = blocks_from(article_list(20))


def _render_many(env: Environment, workers: int, renders: int) -> list[str]:
    if workers == 1:
        return [env.render(BLOCKS) for _ in range(renders)]
    with ThreadPoolExecutor(max_workers=workers) as executor:
        return list(executor.map(lambda _: env.render(BLOCKS), range(renders)))


@pytest.mark.benchmark(group="concurrent")
@pytest.mark.parametrize("workers", [1, 2, 4, 8])
def test_concurrent_renders(benchmark: BenchmarkFixture, strata_env: Environment, workers: int) -> None:
    results = benchmark(_render_many, strata_env, workers, 32)
    assert len(set(results)) == 1


def test_gil_status() -> None:
    """Report whether the GIL is active (informational)."""
    is_enabled = getattr(sys, "_is_gil_enabled", lambda: True)()
    print(f"GIL enabled: {is_enabled}")
