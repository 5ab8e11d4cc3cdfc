"""
Region lookups against the commerce backend

A region is a backend-defined pricing zone keyed by country code. Prices
(`calculated_price`) are only resolved when a region is sent with product
queries.

Author: MinkenWorld
Date: 2025-11-02
"""
import logging
from typing import Any, Dict, List, Optional

from app.connectors.medusa_connector import CommerceAPIError, MedusaConnector, get_connector
from app.core.config import settings

logger = logging.getLogger(__name__)


async def list_regions(connector: MedusaConnector = None) -> List[Dict[str, Any]]:
    """
    List all regions with their countries.

    Returns:
        List of region dicts; empty if the backend fails
    """
    connector = connector or get_connector()
    try:
        data = await connector.fetch(
            "/store/regions",
            query={"fields": "id,name,currency_code,*countries"},
            cache_ttl=settings.CATALOG_CACHE_TTL_SECONDS
        )
    except CommerceAPIError as e:
        logger.error(f"Failed to list regions: {e}")
        return []
    return data.get("regions") or []


async def retrieve_region(region_id: str, connector: MedusaConnector = None) -> Optional[Dict[str, Any]]:
    """Get a single region by ID, or None"""
    connector = connector or get_connector()
    try:
        data = await connector.fetch(
            f"/store/regions/{region_id}",
            cache_ttl=settings.CATALOG_CACHE_TTL_SECONDS
        )
    except CommerceAPIError as e:
        logger.error(f"Failed to retrieve region {region_id}: {e}")
        return None
    return data.get("region")


async def get_region(country_code: str, connector: MedusaConnector = None) -> Optional[Dict[str, Any]]:
    """
    Find the region serving a country.

    Args:
        country_code: ISO 3166-1 alpha-2 code (case-insensitive, e.g. 'ke')

    Returns:
        Region dict or None when no region lists the country
    """
    if not country_code:
        return None

    code = country_code.lower()
    for region in await list_regions(connector):
        for country in region.get("countries") or []:
            if (country.get("iso_2") or "").lower() == code:
                return region

    logger.info(f"No region found for country code '{country_code}'")
    return None
