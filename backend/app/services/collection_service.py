"""
Product collection lookups

Author: MinkenWorld
Date: 2025-11-02
"""
import logging
from typing import Any, Dict, List, Optional

from app.connectors.medusa_connector import CommerceAPIError, MedusaConnector, get_connector
from app.core.config import settings

logger = logging.getLogger(__name__)


def _collection_sort_key(collection: Dict[str, Any]):
    # Ranked collections first (lower rank = higher priority), then by title
    rank = collection.get("rank")
    if rank is not None:
        return (0, rank, "")
    return (1, 0, (collection.get("title") or "").lower())


def sort_collections(collections: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return sorted(collections, key=_collection_sort_key)


async def retrieve_collection(collection_id: str, connector: MedusaConnector = None) -> Optional[Dict[str, Any]]:
    """Get a collection by ID, or None"""
    connector = connector or get_connector()
    try:
        data = await connector.fetch(
            f"/store/collections/{collection_id}",
            cache_ttl=settings.CATALOG_CACHE_TTL_SECONDS
        )
    except CommerceAPIError as e:
        logger.error(f"Failed to retrieve collection {collection_id}: {e}")
        return None
    return data.get("collection")


async def list_collections(
    query: Optional[Dict[str, Any]] = None,
    connector: MedusaConnector = None
) -> Dict[str, Any]:
    """
    List collections ordered by rank.

    Args:
        query: Extra query params; `limit`/`offset` default to 100/0

    Returns:
        {"collections": [...], "count": N} where N is the number returned
    """
    connector = connector or get_connector()
    query = dict(query or {})
    query["limit"] = query.get("limit") or 100
    query["offset"] = query.get("offset") or 0

    try:
        data = await connector.fetch(
            "/store/collections",
            query=query,
            cache_ttl=settings.CATALOG_CACHE_TTL_SECONDS
        )
    except CommerceAPIError as e:
        logger.error(f"Failed to list collections: {e}")
        return {"collections": [], "count": 0}

    collections = sort_collections(data.get("collections") or [])
    logger.debug(f"Collections fetched: {len(collections)}")

    return {"collections": collections, "count": len(collections)}


async def get_collection_by_handle(handle: str, connector: MedusaConnector = None) -> Optional[Dict[str, Any]]:
    """Get a collection (with its products) by URL handle, or None"""
    connector = connector or get_connector()
    try:
        data = await connector.fetch(
            "/store/collections",
            query={"handle": handle, "fields": "*products"},
            cache_ttl=settings.CATALOG_CACHE_TTL_SECONDS
        )
    except CommerceAPIError as e:
        logger.error(f"Failed to get collection '{handle}': {e}")
        return None

    collections = data.get("collections") or []
    return collections[0] if collections else None
