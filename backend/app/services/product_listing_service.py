"""
Product Listing Service
Fetches catalog windows from the commerce backend and sorts, filters and
paginates them for storefront listings and the shopping assistant.

Listing pipeline:
1. Fetch up to 100 products for a scope (category, collection)
2. Keep only one seller's products when a seller is requested
3. Sort client-side (price_asc, price_desc, created_at)
4. Slice the requested page

Product reads are never cached so prices and stock stay current.

Author: MinkenWorld
Date: 2025-11-02
"""
import logging
import math
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from app.connectors.medusa_connector import CommerceAPIError, MedusaConnector, get_connector
from app.core.config import settings
from app.domain.product import ProductListResult, ProductSummary
from app.services.region_service import get_region, retrieve_region

logger = logging.getLogger(__name__)

# Size of the window fetched for client-side sorting
SORT_WINDOW = 100

SORT_OPTIONS = ("price_asc", "price_desc", "created_at")
DEFAULT_SORT = "created_at"

LISTING_FIELDS = (
    "*variants.calculated_price,*seller,*variants,*seller.products,"
    "*seller.reviews,*seller.reviews.customer,*seller.reviews.seller,*seller.products.variants,"
    "*attribute_values,*attribute_values.attribute,*images,*thumbnail,*variants.images"
)
SORT_WINDOW_FIELDS = "*variants.calculated_price,*seller,*variants,*images,*thumbnail,*variants.images"
SEARCH_FIELDS = "*variants,*variants.calculated_price,*images,*thumbnail"

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


# ============================================================================
# SORTING
# ============================================================================

def _min_price(product: Dict[str, Any]) -> float:
    variants = product.get("variants") or []
    if not variants:
        return math.inf
    return min(
        ((variant or {}).get("calculated_price") or {}).get("calculated_amount") or 0
        for variant in variants
    )


def _created_at(product: Dict[str, Any]) -> datetime:
    value = product.get("created_at")
    if not value:
        return _EPOCH
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return _EPOCH
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def sort_products(products: List[Dict[str, Any]], sort_by: Optional[str] = None) -> List[Dict[str, Any]]:
    """
    Sort products client-side.

    Args:
        products: Backend product dicts
        sort_by: 'price_asc', 'price_desc' or 'created_at' (newest first).
            Unknown or missing keys fall back to 'created_at'.

    Returns:
        New sorted list (the input is not modified). Ties keep backend order.
    """
    if sort_by not in SORT_OPTIONS:
        if sort_by:
            logger.warning(f"Unknown sort option '{sort_by}', using '{DEFAULT_SORT}'")
        sort_by = DEFAULT_SORT

    if sort_by == "price_asc":
        return sorted(products, key=_min_price)
    if sort_by == "price_desc":
        return sorted(products, key=_min_price, reverse=True)
    return sorted(products, key=_created_at, reverse=True)


def filter_by_seller(products: List[Dict[str, Any]], seller_id: Optional[str]) -> List[Dict[str, Any]]:
    """Keep products whose nested seller ID equals seller_id (no-op when seller_id is empty)"""
    if not seller_id:
        return list(products)
    return [p for p in products if (p.get("seller") or {}).get("id") == seller_id]


def paginate(items: List[Any], page: int, limit: int) -> List[Any]:
    page = max(page, 1)
    start = (page - 1) * limit
    return items[start:start + limit]


# ============================================================================
# LISTING
# ============================================================================

async def list_products(
    page: int = 1,
    query_params: Optional[Dict[str, Any]] = None,
    country_code: Optional[str] = None,
    region_id: Optional[str] = None,
    category_id: Optional[str] = None,
    collection_id: Optional[str] = None,
    headers: Optional[Dict[str, str]] = None,
    connector: MedusaConnector = None
) -> ProductListResult:
    """
    Fetch one backend page of products.

    Args:
        page: 1-based page number (values below 1 are treated as 1)
        query_params: Extra Store API params; `limit` defaults to PRODUCT_LIMIT
        country_code: Country used to resolve the pricing region
        region_id: Region ID, used when no country code is given
        category_id: Optional category scope
        collection_id: Optional collection scope
        headers: Optional customer auth headers

    Returns:
        ProductListResult; empty when the backend returns nothing or fails

    Raises:
        ValueError: if neither country_code nor region_id is given
    """
    if not country_code and not region_id:
        raise ValueError("Country code or region ID is required")

    connector = connector or get_connector()
    query_params = dict(query_params or {})
    limit = int(query_params.get("limit") or settings.PRODUCT_LIMIT)
    page = max(page, 1)
    offset = (page - 1) * limit

    if country_code:
        region = await get_region(country_code, connector=connector)
    else:
        region = await retrieve_region(region_id, connector=connector)

    if not region:
        logger.warning(
            f"No region found (country_code={country_code}, region_id={region_id}); "
            f"continuing without region filter"
        )

    query = {
        "country_code": country_code,
        "category_id": category_id,
        "collection_id": collection_id,
        "limit": limit,
        "offset": offset,
        "region_id": region.get("id") if region else None,
        "fields": LISTING_FIELDS,
        **query_params
    }

    try:
        data = await connector.fetch("/store/products", query=query, headers=headers)
    except CommerceAPIError as e:
        logger.error(f"Product fetch failed: {e}")
        return ProductListResult.empty()

    products = data.get("products") or []
    if not products:
        return ProductListResult.empty()

    count = int(data.get("count") or len(products))
    logger.info(f"Products fetched: {len(products)}, count: {count}")

    return ProductListResult(
        products=products,
        count=count,
        next_page=page + 1 if count > offset + limit else None
    )


async def list_products_with_sort(
    country_code: str,
    page: int = 1,
    sort_by: Optional[str] = DEFAULT_SORT,
    limit: Optional[int] = None,
    category_id: Optional[str] = None,
    collection_id: Optional[str] = None,
    seller_id: Optional[str] = None,
    query_params: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
    connector: MedusaConnector = None
) -> ProductListResult:
    """
    Fetch a window of 100 products, then filter, sort and paginate locally.

    Args:
        country_code: Country used to resolve the pricing region
        page: 1-based page number
        sort_by: Sort option (see sort_products)
        limit: Page size (default PRODUCT_LIMIT)
        category_id: Optional category scope
        collection_id: Optional collection scope
        seller_id: Keep only products of this seller

    Returns:
        ProductListResult where `count` is the size of the filtered set
    """
    limit = limit or settings.PRODUCT_LIMIT
    page = max(page, 1)

    window = await list_products(
        page=1,
        query_params={
            **(query_params or {}),
            "limit": SORT_WINDOW,
            "fields": SORT_WINDOW_FIELDS
        },
        country_code=country_code,
        category_id=category_id,
        collection_id=collection_id,
        headers=headers,
        connector=connector
    )

    filtered = filter_by_seller(window.products, seller_id)
    if seller_id:
        logger.debug(f"Seller filter '{seller_id}': {len(window.products)} -> {len(filtered)} products")

    sorted_products = sort_products(filtered, sort_by)
    page_products = paginate(sorted_products, page, limit)
    has_more = len(sorted_products) > page * limit

    return ProductListResult(
        products=page_products,
        count=len(sorted_products),
        next_page=page + 1 if has_more else None
    )


# ============================================================================
# SEARCH
# ============================================================================

async def fetch_products(
    query: Optional[str] = None,
    limit: int = 20,
    region_id: Optional[str] = None,
    connector: MedusaConnector = None
) -> List[Dict[str, Any]]:
    """
    Fetch products with an optional free-text query.

    Non-2xx responses yield an empty list; an unreachable backend raises
    CommerceAPIError.
    """
    connector = connector or get_connector()
    try:
        data = await connector.fetch(
            "/store/products",
            query={
                "q": query or None,
                "limit": limit,
                "region_id": region_id,
                "fields": SEARCH_FIELDS
            }
        )
    except CommerceAPIError as e:
        if e.status_code is None:
            raise
        logger.error(f"Product fetch failed: {e}")
        return []
    return data.get("products") or []


def matches_all_terms(product: Dict[str, Any], query: str) -> bool:
    """True when every query term longer than two characters appears in title, description or handle"""
    searchable = " ".join([
        product.get("title") or "",
        product.get("description") or "",
        product.get("handle") or ""
    ]).lower()
    terms = [term for term in query.lower().split() if len(term) > 2]
    return all(term in searchable for term in terms)


async def search_products(
    query: str,
    limit: int = 20,
    region_id: Optional[str] = None,
    connector: MedusaConnector = None
) -> List[Dict[str, Any]]:
    """
    Search products, falling back to local term matching.

    The backend search is tried first. When it finds nothing, a window of
    100 products is fetched and filtered so that e.g. "grey pants" still
    matches "Grey Sweat Pants".
    """
    products = await fetch_products(query, limit, region_id=region_id, connector=connector)
    logger.info(f"Search '{query}' -> {len(products)} products")

    if not products:
        all_products = await fetch_products(None, SORT_WINDOW, region_id=region_id, connector=connector)
        products = [p for p in all_products if matches_all_terms(p, query)]
        logger.info(f"Manual filter for '{query}' found {len(products)} products")

    return products


async def resolve_default_region_id(connector: MedusaConnector = None) -> Optional[str]:
    """Region ID for DEFAULT_REGION, or None when it cannot be resolved"""
    region = await get_region(settings.DEFAULT_REGION, connector=connector)
    return region.get("id") if region else None


# ============================================================================
# SUMMARIES
# ============================================================================

def to_product_summary(product: Dict[str, Any], default_currency: str = None) -> ProductSummary:
    """Reduce a backend product to the card shown by the shopping assistant"""
    default_currency = default_currency or settings.DEFAULT_CURRENCY
    variants = product.get("variants") or []
    first_variant = (variants[0] or {}) if variants else {}
    calculated = first_variant.get("calculated_price") or {}
    images = product.get("images") or []
    description = product.get("description")

    return ProductSummary(
        id=product.get("id", ""),
        variant_id=first_variant.get("id") or "",
        title=product.get("title") or "",
        description=description[:150] if description else None,
        price=calculated.get("calculated_amount") or 0,
        currency=calculated.get("currency_code") or default_currency,
        thumbnail=product.get("thumbnail") or ((images[0] or {}).get("url") if images else "") or "",
        handle=product.get("handle")
    )
