"""Rendering benchmarks over realistic block trees.

Sizes:
- "text": 50 text blocks with modifier chains, no components
- "list-N": a menu component plus N card components in a loop, each card
  looping over its tags into nested tag components and filling a slot

Run with: pytest benchmarks/test_benchmark_render.py --benchmark-only
Compare: pytest benchmarks/test_benchmark_render.py --benchmark-compare
"""

from __future__ import annotations

import pytest
from pytest_benchmark.fixture import BenchmarkFixture

from benchmarks.fixtures.trees import PAGE, TEXT_HEAVY, article_list
from strata import Environment, blocks_from


@pytest.mark.benchmark(group="render:text")
def test_render_text_blocks(benchmark: BenchmarkFixture, strata_env: Environment) -> None:
    blocks = blocks_from(TEXT_HEAVY)
    result = benchmark(strata_env.render, blocks, {"page": PAGE})
    assert "BENCHMARKS" not in result
    assert "ADA" in result


@pytest.mark.benchmark(group="render:components")
@pytest.mark.parametrize("count", [10, 50, 200])
def test_render_article_list(benchmark: BenchmarkFixture, strata_env: Environment, count: int) -> None:
    blocks = blocks_from(article_list(count))
    result = benchmark(strata_env.render, blocks)
    assert result.count("<article>") == count


@pytest.mark.benchmark(group="render:parse")
def test_block_tree_parse(benchmark: BenchmarkFixture) -> None:
    tree = article_list(200)
    benchmark(blocks_from, tree)
