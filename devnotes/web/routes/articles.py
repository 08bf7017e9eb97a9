"""
Articles API routes: publish a new post into the content repository.

Why:
    Writers publish from the CMS front end; the server renders the markdown
    file with front matter and commits it with the writer's own provider token,
    so the provider enforces who may write to the repository.
"""
from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
import logging

from devnotes.publishing.articles import ArticleDraft, publish_article
from devnotes.storage.ports import ContentStoreError, RevisionConflictError
from devnotes.web import storage_wiring
from devnotes.web.auth_utils import PRIVATE_NO_STORE, bearer_token, require_provider_user


articles_router = APIRouter(tags=["Articles"])
logger = logging.getLogger("devnotes.web.articles")


class ArticlePublish(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    summary: str = Field(default="", max_length=500)
    content: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1, max_length=100)
    tags: list[str] = Field(default_factory=list, max_length=20)
    slug: str | None = Field(default=None, max_length=120)


@articles_router.post("/api/articles")
async def articles_publish(request: Request, payload: ArticlePublish):
    """Publish an article as `content/posts/{date}-{slug}.md`.

    Behavior:
        - 201 `{path, revision}` when the file was created.
        - 409 when a post with the same date and slug already exists.
        - 502 when the repository rejects or fails the write.
        - 503 when REPO_OWNER/REPO_NAME are not configured.

    Permissions:
        Bearer provider token; the author is the token's login.
    """
    profile, error = require_provider_user(request)
    if error:
        return error
    store = storage_wiring.get_repo_store(bearer_token(request) or "")
    if store is None:
        return JSONResponse({"error": "repository_not_configured"}, status_code=503, headers=dict(PRIVATE_NO_STORE))

    draft = ArticleDraft(
        title=payload.title.strip(),
        summary=payload.summary.strip(),
        content=payload.content,
        category=payload.category.strip(),
        tags=[t.strip() for t in payload.tags if t and t.strip()],
        slug=payload.slug,
    )
    try:
        published = publish_article(store, draft, author=str(profile.login))
    except RevisionConflictError:
        return JSONResponse({"error": "article_exists"}, status_code=409, headers=dict(PRIVATE_NO_STORE))
    except ContentStoreError as exc:
        logger.warning("Article publish failed: %s status=%s", exc.code, exc.status_code)
        return JSONResponse({"error": "bad_gateway"}, status_code=502, headers=dict(PRIVATE_NO_STORE))
    logger.info("Published %s by %s", published.path, profile.login)
    return JSONResponse(
        {"path": published.path, "revision": published.revision},
        status_code=201,
        headers=dict(PRIVATE_NO_STORE),
    )
