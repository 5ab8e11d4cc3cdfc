"""
Shopping Chat Tools for Claude AI Integration

This module provides 3 tools for browsing the marketplace catalog:
1. search_products - Free-text search with local term-matching fallback
2. get_categories - Category names and handles
3. list_all_products - Plain catalog listing

Every tool returns a JSON string. Product-bearing tools always include a
`products` list of ProductSummary dicts so the chat endpoint can surface
them as cards. Failures never raise: they come back as an apology payload.

Author: MinkenWorld
Date: 2025-11-03
"""
import json
import logging
from typing import Any, Dict, List

from app.core.config import settings
from app.services.category_service import fetch_category_index
from app.services.product_listing_service import (
    fetch_products,
    resolve_default_region_id,
    search_products as search_catalog,
    to_product_summary,
)

logger = logging.getLogger(__name__)


# ============================================================================
# TOOL DEFINITIONS (Anthropic format)
# ============================================================================

TOOLS = [
    {
        "name": "search_products",
        "description": "Search for products in the marketplace based on a query. Use this when the user asks for specific items like houses, cars, electronics, bags, apartments, or locations like Kilimani, Lavington or Kileleshwa.",
        "input_schema": {
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": "The search query, e.g. 'houses', 'cars', 'bags', 'Kilimani'"
                },
                "limit": {
                    "type": "integer",
                    "description": "Number of results to return (default: 20)"
                }
            },
            "required": ["query"]
        }
    },
    {
        "name": "get_categories",
        "description": "Get the list of available product categories. Use this when the user asks 'what categories do you have?' or wants to browse categories.",
        "input_schema": {
            "type": "object",
            "properties": {},
            "required": []
        }
    },
    {
        "name": "list_all_products",
        "description": "List available products in the marketplace. Use when the user asks to see all products or browse everything.",
        "input_schema": {
            "type": "object",
            "properties": {
                "limit": {
                    "type": "integer",
                    "description": "Number of products to show (default: 10)"
                }
            },
            "required": []
        }
    }
]


def _summaries(products: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [to_product_summary(p, settings.DEFAULT_CURRENCY).model_dump() for p in products]


# ============================================================================
# TOOL 1: search_products
# ============================================================================

async def search_products(query: str, limit: int = 20) -> str:
    """
    Search the catalog for products matching a query.

    Args:
        query: Free-text query (e.g., 'grey pants', 'Kilimani')
        limit: Maximum number of backend results

    Returns:
        JSON string with message and products
    """
    try:
        region_id = await resolve_default_region_id()
        products = await search_catalog(query, limit=limit, region_id=region_id)

        if not products:
            return json.dumps({
                "message": f"No products found for \"{query}\". Try a different search term like 'houses', 'apartments', or browse categories.",
                "products": []
            }, ensure_ascii=False)

        return json.dumps({
            "message": f"Found {len(products)} products matching \"{query}\"",
            "products": _summaries(products)
        }, ensure_ascii=False)

    except Exception as e:
        logger.error(f"Search error: {e}", exc_info=True)
        return json.dumps({
            "error": "Error searching products",
            "message": "I had trouble searching. Try browsing categories instead.",
            "products": []
        }, ensure_ascii=False)


# ============================================================================
# TOOL 2: get_categories
# ============================================================================

async def get_categories() -> str:
    """
    List every category (top-level and nested) with name and handle.

    Returns:
        JSON string with message and categories
    """
    try:
        categories = await fetch_category_index()

        return json.dumps({
            "message": f"Available categories: {', '.join(c.get('name') or '' for c in categories)}",
            "categories": [
                {"id": c.get("id"), "name": c.get("name"), "handle": c.get("handle")}
                for c in categories
            ]
        }, ensure_ascii=False)

    except Exception as e:
        logger.error(f"Categories error: {e}", exc_info=True)
        return json.dumps({
            "error": "Error fetching categories",
            "message": "I'm having trouble loading categories right now."
        }, ensure_ascii=False)


# ============================================================================
# TOOL 3: list_all_products
# ============================================================================

async def list_all_products(limit: int = 10) -> str:
    """
    List catalog products without a query.

    Args:
        limit: Number of products to return

    Returns:
        JSON string with message and products
    """
    try:
        region_id = await resolve_default_region_id()
        products = await fetch_products(None, limit, region_id=region_id)

        if not products:
            return json.dumps({
                "message": "No products available at the moment.",
                "products": []
            }, ensure_ascii=False)

        return json.dumps({
            "message": f"Here are {len(products)} products from our marketplace",
            "products": _summaries(products)
        }, ensure_ascii=False)

    except Exception as e:
        logger.error(f"List products error: {e}", exc_info=True)
        return json.dumps({
            "error": "Error listing products",
            "message": "I couldn't load the products. Please try again.",
            "products": []
        }, ensure_ascii=False)


# ============================================================================
# DISPATCH
# ============================================================================

TOOL_FUNCTIONS = {
    "search_products": search_products,
    "get_categories": get_categories,
    "list_all_products": list_all_products,
}


async def execute_tool(tool_name: str, tool_input: Dict[str, Any]) -> str:
    """
    Execute a tool by name with given input parameters.

    Args:
        tool_name: Name of the tool to execute
        tool_input: Dictionary of input parameters

    Returns:
        JSON string result from the tool
    """
    if tool_name not in TOOL_FUNCTIONS:
        return json.dumps({"error": f"Tool '{tool_name}' not found"}, ensure_ascii=False)

    try:
        return await TOOL_FUNCTIONS[tool_name](**(tool_input or {}))
    except TypeError as e:
        return json.dumps({"error": f"Invalid parameters for {tool_name}: {str(e)}"}, ensure_ascii=False)
    except Exception as e:
        return json.dumps({"error": f"Error executing {tool_name}: {str(e)}"}, ensure_ascii=False)


def extract_products(tool_result: str) -> List[Dict[str, Any]]:
    """Products carried by a tool result, or [] when it has none or is not JSON"""
    try:
        payload = json.loads(tool_result)
    except (TypeError, ValueError):
        return []
    if isinstance(payload, dict) and isinstance(payload.get("products"), list):
        return payload["products"]
    return []
