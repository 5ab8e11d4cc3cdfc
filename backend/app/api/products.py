"""
Products API Endpoints
Catalog listings for category, collection and seller pages

Author: MinkenWorld
Date: 2025-11-02
"""
from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Dict, Optional
import logging

from app.core.auth import get_auth_headers
from app.core.config import settings
from app.services.product_listing_service import (
    SORT_OPTIONS,
    list_products_with_sort,
    resolve_default_region_id,
    search_products,
    to_product_summary,
)

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/")
async def get_products(
    country_code: Optional[str] = Query(None, description="Country for pricing (default: DEFAULT_REGION)"),
    category_id: Optional[str] = Query(None, description="Filter by category"),
    collection_id: Optional[str] = Query(None, description="Filter by collection"),
    seller_id: Optional[str] = Query(None, description="Only products of this seller"),
    sort_by: Optional[str] = Query(None, description=f"One of: {', '.join(SORT_OPTIONS)}"),
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1, le=100),
    auth_headers: Dict[str, str] = Depends(get_auth_headers)
):
    """
    Get one page of a sorted product listing

    Fetches a window of 100 products for the scope, filters by seller,
    sorts and paginates. Backend failures return an empty page.
    """
    limit = limit or settings.PRODUCT_LIMIT

    result = await list_products_with_sort(
        country_code=country_code or settings.DEFAULT_REGION,
        page=page,
        sort_by=sort_by,
        limit=limit,
        category_id=category_id,
        collection_id=collection_id,
        seller_id=seller_id,
        headers=auth_headers or None
    )

    return {
        "status": "success",
        "total": result.count,
        "page": page,
        "limit": limit,
        "pages": max(-(-result.count // limit), 1),
        "next_page": result.next_page,
        "count": len(result.products),
        "data": result.products
    }


@router.get("/search")
async def search(
    q: str = Query(..., min_length=1, description="Search query"),
    limit: int = Query(20, ge=1, le=100)
):
    """
    Search products and return compact product cards
    """
    try:
        region_id = await resolve_default_region_id()
        products = await search_products(q, limit=limit, region_id=region_id)
    except Exception as e:
        logger.error(f"Search failed for '{q}': {e}")
        raise HTTPException(status_code=502, detail="Product search is unavailable right now")

    summaries = [to_product_summary(p).model_dump() for p in products]
    return {
        "status": "success",
        "count": len(summaries),
        "data": summaries
    }
