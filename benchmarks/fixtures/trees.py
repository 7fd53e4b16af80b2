"""Block trees, patterns and sources shared by the benchmarks."""

from __future__ import annotations

from typing import Any

ARTICLES = [
    {
        "id": n,
        "title": f"Article {n}",
        "author": {"name": f"author-{n % 7}", "url": f"/authors/{n % 7}"},
        "tags": [f"tag-{n % 3}", f"tag-{n % 5}"],
        "published": f"2024-{n % 12 + 1:02d}-{n % 28 + 1:02d}T09:30:00",
    }
    for n in range(200)
]

PRESETS = {
    "articles": {
        "key": "latestArticles",
        "config": {"type": "json", "data": ARTICLES},
    },
    "nav": {
        "key": "mainNav",
        "config": {"type": "json", "data": [{"label": f"Link {n}", "url": f"/{n}"} for n in range(8)]},
    },
}


def _text(content: str) -> dict[str, Any]:
    return {"blockName": "text", "attrs": {"content": content}}


def _element(tag: str, *inner: dict[str, Any], **attributes: Any) -> dict[str, Any]:
    return {"blockName": "element", "attrs": {"tag": tag, "attributes": attributes}, "innerBlocks": list(inner)}


PATTERNS = {
    "tag": {
        "blocks": [_element("span", _text("{props.label.toUppercase()}"), **{"class": "tag"})],
        "props": [{"key": "label", "type": {"primitive": "string"}}],
    },
    "card": {
        "blocks": [
            _element(
                "article",
                _text("<h2>{props.title}</h2>"),
                _text("<p>{props.author} · {props.date.format('M j, Y')}</p>"),
                {
                    "blockName": "loop",
                    "attrs": {"target": "props.tags", "itemId": "tag"},
                    "innerBlocks": [
                        {"blockName": "component", "attrs": {"ref": "tag", "attributes": {"label": "{tag}"}}}
                    ],
                },
                {"blockName": "slot-placeholder", "attrs": {"name": "footer"}},
            )
        ],
        "props": [
            {"key": "title", "type": {"primitive": "string"}},
            {"key": "author", "type": {"primitive": "string"}},
            {"key": "date", "type": {"primitive": "string"}},
            {"key": "tags", "type": {"primitive": "array"}},
        ],
    },
    "menu": {
        "blocks": [
            {
                "blockName": "loop",
                "attrs": {"target": "props.links"},
                "innerBlocks": [_element("a", _text("{item.label}"), href="{item.url}")],
            }
        ],
        "props": [{"key": "links", "type": {"primitive": "array", "specialized": "array"}, "default": "mainNav"}],
    },
}


def article_list(count: int) -> list[dict[str, Any]]:
    """Loop over ``count`` articles, one card component per item."""
    card = {
        "blockName": "component",
        "attrs": {
            "ref": "card",
            "attributes": {
                "title": "{item.title}",
                "author": "{item.author.name}",
                "date": "{item.published}",
                "tags": "{item.tags}",
            },
        },
        "innerBlocks": [
            {
                "blockName": "slot-content",
                "attrs": {"name": "footer"},
                "innerBlocks": [_text("<a href=\"{item.author.url}\">#{item.id}</a>")],
            }
        ],
    }
    return [
        {"blockName": "component", "attrs": {"ref": "menu"}},
        {
            "blockName": "loop",
            "attrs": {"target": f"articles.slice(0, {count})"},
            "innerBlocks": [card],
        },
    ]


TEXT_HEAVY = [
    _text("<p>{page.title} by {page.author.name.toUppercase()} on {page.date.format('Y-m-d')}</p>")
    for _ in range(50)
]

PAGE = {"title": "Benchmarks", "author": {"name": "ada"}, "date": "2024-05-01T12:00:00"}
