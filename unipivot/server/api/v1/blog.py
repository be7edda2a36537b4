"""
Blog Endpoints.

Published posts are public and addressed by slug; drafts and the editing
endpoints are for administrators.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from unipivot.core.database import get_session
from unipivot.core.database.entities.users import User
from unipivot.core.models.io.common import Page
from unipivot.core.models.io.content import BlogPostCreate, BlogPostRead, BlogPostUpdate
from unipivot.server.deps import require_admin
from unipivot.server.services import content as content_service

router = APIRouter(tags=["blog"])


@router.get(
    "",
    response_model=Page[BlogPostRead],
    summary="List Blog Posts",
    description="Published posts, newest first, optionally for one category.",
)
async def list_posts(
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    category: Optional[str] = None,
    session: AsyncSession = Depends(get_session),
) -> Page[BlogPostRead]:
    items, total = await content_service.list_posts(session, page, limit, category)
    return Page[BlogPostRead](
        items=[BlogPostRead.model_validate(p) for p in items], total=total, page=page, limit=limit
    )


@router.get(
    "/admin/posts",
    response_model=Page[BlogPostRead],
    summary="List All Blog Posts",
    description="Every post including unpublished drafts.",
    responses={403: {"description": "ADMIN grade required"}},
)
async def list_all_posts(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    category: Optional[str] = None,
    _: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> Page[BlogPostRead]:
    items, total = await content_service.list_posts(session, page, limit, category, published_only=False)
    return Page[BlogPostRead](
        items=[BlogPostRead.model_validate(p) for p in items], total=total, page=page, limit=limit
    )


@router.get(
    "/{slug}",
    response_model=BlogPostRead,
    summary="Read Blog Post",
    description="Return a published post by slug and count the view.",
    responses={404: {"description": "Post not found"}},
)
async def read_post(slug: str, session: AsyncSession = Depends(get_session)) -> BlogPostRead:
    post = await content_service.view_post(session, slug)
    return BlogPostRead.model_validate(post)


@router.get(
    "/{slug}/related",
    response_model=List[BlogPostRead],
    summary="Related Blog Posts",
    description="Up to three other published posts of the same category. Unknown or unpublished posts have none.",
)
async def related_posts(slug: str, session: AsyncSession = Depends(get_session)) -> List[BlogPostRead]:
    post = await content_service.find_post_by_slug(session, slug)
    if post is None or not post.is_published:
        return []
    return [BlogPostRead.model_validate(p) for p in await content_service.related_posts(session, post)]


@router.post(
    "",
    response_model=BlogPostRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Blog Post",
    responses={
        201: {"description": "Post created"},
        403: {"description": "ADMIN grade required"},
        409: {"description": "Slug already in use"},
    },
)
async def create_post(
    data: BlogPostCreate,
    current_user: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> BlogPostRead:
    """
    Create a blog post.

    - **slug**: Optional; generated from the title when omitted.
    - **category** / **tags**: Used for filtering and related posts.
    - **is_published**: Publishing stamps ``published_at``.
    """
    post = await content_service.create_post(session, current_user, data)
    return BlogPostRead.model_validate(post)


@router.patch(
    "/posts/{post_id}",
    response_model=BlogPostRead,
    summary="Update Blog Post",
    responses={404: {"description": "Post not found"}, 409: {"description": "Slug already in use"}},
)
async def update_post(
    post_id: int,
    data: BlogPostUpdate,
    _: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> BlogPostRead:
    post = await content_service.update_post(session, post_id, data)
    return BlogPostRead.model_validate(post)


@router.delete(
    "/posts/{post_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Blog Post",
    responses={204: {"description": "Post deleted"}, 404: {"description": "Post not found"}},
)
async def delete_post(
    post_id: int,
    _: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> None:
    await content_service.delete_post(session, post_id)
