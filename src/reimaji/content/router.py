"""Cross-content endpoints: bulk administration and the sitemap feed."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from reimaji.auth.dependencies import require_admin
from reimaji.config import get_settings
from reimaji.content.schemas import BulkRequest, BulkResponse, SitemapEntry, SitemapResponse
from reimaji.content.service import ContentService
from reimaji.database import get_session
from reimaji.db.models import News, Research, User

router = APIRouter(prefix="/api/v1", tags=["Content"])

MODELS = {"news": News, "research": Research}
STATIC_PAGES = ("", "/news", "/research", "/courses", "/about")


@router.post("/content/bulk", response_model=BulkResponse)
async def bulk_update(
    body: BulkRequest,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> BulkResponse:
    """Publish, unpublish or remove many news or research items at once."""
    svc = ContentService(db, MODELS[body.kind])
    updated, missing = await svc.bulk(body.action, body.ids)
    await db.commit()
    return BulkResponse(kind=body.kind, action=body.action, updated=updated, missing=missing)


@router.get("/sitemap", response_model=SitemapResponse)
async def sitemap(db: AsyncSession = Depends(get_session)) -> SitemapResponse:
    """Static pages plus the most recent published news and research URLs."""
    settings = get_settings()
    base = settings.frontend_base_url.rstrip("/")

    urls = [SitemapEntry(url=f"{base}{path}") for path in STATIC_PAGES]
    for kind, model in MODELS.items():
        items = await ContentService(db, model).list_published(limit=settings.sitemap_max_items)
        urls.extend(
            SitemapEntry(url=f"{base}/{kind}/{item.slug}", last_modified=item.updated_at)
            for item in items
        )
    return SitemapResponse(urls=urls)
