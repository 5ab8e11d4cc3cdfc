"""
Product category lookups

Author: MinkenWorld
Date: 2025-11-02
"""
import logging
from typing import Any, Dict, List, Optional

from app.connectors.medusa_connector import CommerceAPIError, MedusaConnector, get_connector
from app.core.config import settings

logger = logging.getLogger(__name__)

CATEGORY_FIELDS = "id,handle,name,rank,metadata,parent_category_id,description,*category_children"


def build_category_tree(all_categories: List[Dict[str, Any]]) -> Dict[str, List[Dict[str, Any]]]:
    """
    Shape a flat category list into the navigation tree.

    Top-level categories (no parent) are only containers; the storefront
    shows their children as main categories. Each main category gets its own
    children re-attached from the flat list, since the backend only expands
    one level of `category_children`.

    Returns:
        {"parent_categories": [...], "categories": [...]}
    """
    parent_categories = [c for c in all_categories if not c.get("parent_category_id")]

    main_categories = [
        child
        for parent in parent_categories
        for child in (parent.get("category_children") or [])
    ]

    categories = []
    for main in main_categories:
        children = [c for c in all_categories if c.get("parent_category_id") == main.get("id")]
        if children:
            categories.append({**main, "category_children": children})
        else:
            categories.append(main)

    return {
        "parent_categories": parent_categories,
        "categories": categories
    }


async def list_categories(
    query: Optional[Dict[str, Any]] = None,
    connector: MedusaConnector = None
) -> Dict[str, List[Dict[str, Any]]]:
    """
    List categories as a navigation tree.

    Args:
        query: Extra query params; `limit` defaults to 100

    Returns:
        {"parent_categories": [...], "categories": [...]}, both empty on failure
    """
    connector = connector or get_connector()
    query = dict(query or {})
    limit = query.pop("limit", None) or 100

    try:
        data = await connector.fetch(
            "/store/product-categories",
            query={
                "fields": CATEGORY_FIELDS,
                "include_descendants_tree": "true",
                "include_ancestors_tree": "true",
                "limit": limit,
                **query
            },
            cache_ttl=settings.CATALOG_CACHE_TTL_SECONDS
        )
    except CommerceAPIError as e:
        logger.error(f"Failed to list categories: {e}")
        return {"parent_categories": [], "categories": []}

    all_categories = data.get("product_categories") or []
    logger.debug(f"Categories fetched: {len(all_categories)}")

    return build_category_tree(all_categories)


async def fetch_category_index(connector: MedusaConnector = None) -> List[Dict[str, Any]]:
    """
    Flat list of every category with id, name and handle.

    Raises:
        CommerceAPIError: if the backend fails (callers decide how to degrade)
    """
    connector = connector or get_connector()
    data = await connector.fetch(
        "/store/product-categories",
        query={"fields": "id,name,handle", "limit": 100},
        cache_ttl=settings.CATALOG_CACHE_TTL_SECONDS
    )
    return data.get("product_categories") or []


async def get_category_by_handle(handle: str, connector: MedusaConnector = None) -> Optional[Dict[str, Any]]:
    """Get a category (with its children) by URL handle, or None"""
    connector = connector or get_connector()
    try:
        data = await connector.fetch(
            "/store/product-categories",
            query={"fields": "*category_children", "handle": handle},
            cache_ttl=settings.CATALOG_CACHE_TTL_SECONDS
        )
    except CommerceAPIError as e:
        logger.error(f"Failed to get category '{handle}': {e}")
        return None

    categories = data.get("product_categories") or []
    return categories[0] if categories else None
