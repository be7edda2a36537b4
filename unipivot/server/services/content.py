"""
Notice and blog service.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from unipivot.core.database.base import utc_now
from unipivot.core.database.entities.content import BlogPost, Notice
from unipivot.core.database.entities.users import User
from unipivot.core.database.repositories import AsyncQueryBuilder
from unipivot.core.exceptions import ConflictError, NotFoundError
from unipivot.core.logging_config import get_logger
from unipivot.core.models.io.common import column_values
from unipivot.core.models.io.content import BlogPostCreate, BlogPostUpdate, NoticeCreate, NoticeUpdate
from unipivot.core.rules.identifiers import generate_slug

logger = get_logger(__name__)

RELATED_POSTS_LIMIT = 3


async def list_notices(
    session: AsyncSession, page: int = 1, limit: int = 20, include_private: bool = False
) -> Tuple[List[Notice], int]:
    """Pinned notices first, then newest first."""
    conditions = [] if include_private else [Notice.is_public == True]  # noqa: E712
    stmt = (
        select(Notice)
        .where(*conditions)
        .order_by(Notice.is_pinned.desc(), Notice.created_at.desc(), Notice.id.desc())
    )
    stmt = AsyncQueryBuilder.apply_pagination(stmt, limit, AsyncQueryBuilder.page_offset(page, limit))
    items = list((await session.execute(stmt)).scalars().all())
    total = (await session.execute(select(func.count(Notice.id)).where(*conditions))).scalar_one()
    return items, total


async def get_notice_or_404(session: AsyncSession, notice_id: int, include_private: bool = True) -> Notice:
    notice = await session.get(Notice, notice_id)
    if notice is None or (not notice.is_public and not include_private):
        raise NotFoundError(f"Notice {notice_id} not found")
    return notice


async def view_notice(session: AsyncSession, notice_id: int, include_private: bool = False) -> Notice:
    """Fetch a notice for reading and count the view."""
    notice = await get_notice_or_404(session, notice_id, include_private)
    notice.views += 1
    session.add(notice)
    await session.commit()
    await session.refresh(notice)
    return notice


async def create_notice(session: AsyncSession, author: User, data: NoticeCreate) -> Notice:
    notice = Notice(**column_values(data), author_id=author.id)
    session.add(notice)
    await session.commit()
    await session.refresh(notice)
    logger.info(f"Notice {notice.id} created by user={author.id}")
    return notice


async def update_notice(session: AsyncSession, notice_id: int, data: NoticeUpdate) -> Notice:
    notice = await get_notice_or_404(session, notice_id)
    for key, value in column_values(data, exclude_unset=True).items():
        setattr(notice, key, value)
    session.add(notice)
    await session.commit()
    await session.refresh(notice)
    return notice


async def delete_notice(session: AsyncSession, notice_id: int) -> None:
    notice = await get_notice_or_404(session, notice_id)
    await session.delete(notice)
    await session.commit()


async def list_posts(
    session: AsyncSession,
    page: int = 1,
    limit: int = 12,
    category: Optional[str] = None,
    published_only: bool = True,
) -> Tuple[List[BlogPost], int]:
    conditions = []
    if published_only:
        conditions.append(BlogPost.is_published == True)  # noqa: E712
    if category:
        conditions.append(BlogPost.category == category)
    order = BlogPost.published_at.desc() if published_only else BlogPost.created_at.desc()
    stmt = select(BlogPost).where(*conditions).order_by(order, BlogPost.id.desc())
    stmt = AsyncQueryBuilder.apply_pagination(stmt, limit, AsyncQueryBuilder.page_offset(page, limit))
    items = list((await session.execute(stmt)).scalars().all())
    total = (await session.execute(select(func.count(BlogPost.id)).where(*conditions))).scalar_one()
    return items, total


async def get_post_or_404(session: AsyncSession, post_id: int) -> BlogPost:
    post = await session.get(BlogPost, post_id)
    if post is None:
        raise NotFoundError(f"Blog post {post_id} not found")
    return post


async def find_post_by_slug(session: AsyncSession, slug: str) -> Optional[BlogPost]:
    result = await session.execute(select(BlogPost).where(BlogPost.slug == slug))
    return result.scalars().first()


async def view_post(session: AsyncSession, slug: str) -> BlogPost:
    """Published post by slug; each read counts a view."""
    post = await find_post_by_slug(session, slug)
    if post is None or not post.is_published:
        raise NotFoundError(f"Blog post '{slug}' not found")
    post.views += 1
    session.add(post)
    await session.commit()
    await session.refresh(post)
    return post


async def related_posts(session: AsyncSession, post: BlogPost, limit: int = RELATED_POSTS_LIMIT) -> List[BlogPost]:
    """Other published posts of the same category."""
    if not post.category:
        return []
    result = await session.execute(
        select(BlogPost)
        .where(
            BlogPost.category == post.category,
            BlogPost.id != post.id,
            BlogPost.is_published == True,  # noqa: E712
        )
        .order_by(BlogPost.published_at.desc(), BlogPost.id.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def _ensure_slug_free(session: AsyncSession, slug: str, post_id: Optional[int] = None) -> None:
    existing = await find_post_by_slug(session, slug)
    if existing is not None and existing.id != post_id:
        raise ConflictError(f"Slug '{slug}' is already in use")


async def create_post(session: AsyncSession, author: User, data: BlogPostCreate) -> BlogPost:
    values = column_values(data)
    now = utc_now()
    values["slug"] = data.slug or generate_slug(data.title, now, prefix="post")
    await _ensure_slug_free(session, values["slug"])
    post = BlogPost(**values, author_id=author.id, published_at=now if data.is_published else None)
    session.add(post)
    await session.commit()
    await session.refresh(post)
    logger.info(f"Blog post {post.id} ({post.slug}) created by user={author.id}")
    return post


async def update_post(session: AsyncSession, post_id: int, data: BlogPostUpdate) -> BlogPost:
    post = await get_post_or_404(session, post_id)
    changes = column_values(data, exclude_unset=True)
    if changes.get("slug"):
        await _ensure_slug_free(session, changes["slug"], post.id)
    elif "slug" in changes:
        del changes["slug"]
    if changes.get("is_published") and post.published_at is None:
        post.published_at = utc_now()
    for key, value in changes.items():
        setattr(post, key, value)
    session.add(post)
    await session.commit()
    await session.refresh(post)
    return post


async def delete_post(session: AsyncSession, post_id: int) -> None:
    post = await get_post_or_404(session, post_id)
    await session.delete(post)
    await session.commit()
