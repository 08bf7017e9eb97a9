"""Article publishing service: write markdown posts into the content repo."""
from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

import yaml

from devnotes.storage.ports import ContentStore

POSTS_DIR = "content/posts"

_SLUG_PATTERN = re.compile(r"[^a-z0-9]+")


def slugify(value: str, *, max_length: int = 80) -> str:
    normalized = unicodedata.normalize("NFKD", value or "")
    ascii_value = normalized.encode("ascii", "ignore").decode("ascii").lower()
    slug = _SLUG_PATTERN.sub("-", ascii_value).strip("-")
    return slug[:max_length].rstrip("-") or "post"


@dataclass(frozen=True)
class ArticleDraft:
    title: str
    summary: str
    content: str
    category: str
    tags: List[str] = field(default_factory=list)
    slug: Optional[str] = None


@dataclass(frozen=True)
class PublishedArticle:
    path: str
    revision: str


def article_path(draft: ArticleDraft, published_on: date) -> str:
    slug = slugify(draft.slug or draft.title)
    return f"{POSTS_DIR}/{published_on.isoformat()}-{slug}.md"


def render_markdown(draft: ArticleDraft, *, author: str, published_on: date) -> str:
    """Render the post file: YAML front matter followed by the markdown body."""
    front_matter = {
        "title": draft.title,
        "date": published_on,
        "author": author,
        "description": draft.summary,
        "tags": list(draft.tags),
        "category": draft.category,
        "draft": False,
    }
    header = yaml.safe_dump(front_matter, sort_keys=False, allow_unicode=True)
    body = draft.content.rstrip("\n")
    return f"---\n{header}---\n\n{body}\n"


def publish_article(
    store: ContentStore,
    draft: ArticleDraft,
    *,
    author: str,
    published_on: Optional[date] = None,
) -> PublishedArticle:
    """Create the post file; never overwrites an existing post.

    Raises RevisionConflictError if a post with the same path exists.
    """
    published_on = published_on or date.today()
    path = article_path(draft, published_on)
    text = render_markdown(draft, author=author, published_on=published_on)
    revision = store.compare_and_swap(
        path,
        content=text.encode("utf-8"),
        expected_revision=None,
        message=f"Publish article: {draft.title}",
    )
    return PublishedArticle(path=path, revision=revision)


__all__ = [
    "ArticleDraft",
    "POSTS_DIR",
    "PublishedArticle",
    "article_path",
    "publish_article",
    "render_markdown",
    "slugify",
]
