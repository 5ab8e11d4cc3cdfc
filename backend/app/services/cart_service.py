"""
Cart operations against the commerce backend

This is the only write path of the storefront: create a cart and add line
items to it. Totals, stock checks and pricing rules stay in the backend.

Author: MinkenWorld
Date: 2025-11-05
"""
import logging
from typing import Any, Dict, Optional

from app.connectors.medusa_connector import MedusaConnector, get_connector

logger = logging.getLogger(__name__)


async def create_cart(
    region_id: Optional[str] = None,
    headers: Optional[Dict[str, str]] = None,
    connector: MedusaConnector = None
) -> Dict[str, Any]:
    """
    Create an empty cart.

    Raises:
        CommerceAPIError: if the backend rejects the request
    """
    connector = connector or get_connector()
    body = {"region_id": region_id} if region_id else {}
    data = await connector.post("/store/carts", json=body, headers=headers)
    cart = data.get("cart") or {}
    logger.info(f"Created cart {cart.get('id')} (region={region_id})")
    return cart


async def add_line_item(
    cart_id: str,
    variant_id: str,
    quantity: int = 1,
    headers: Optional[Dict[str, str]] = None,
    connector: MedusaConnector = None
) -> Dict[str, Any]:
    """
    Add a variant to a cart.

    Args:
        cart_id: Backend cart ID
        variant_id: Product variant ID
        quantity: Units to add (>= 1)

    Returns:
        Updated cart

    Raises:
        ValueError: if quantity < 1 or IDs are empty
        CommerceAPIError: if the backend rejects the request
    """
    if not cart_id or not variant_id:
        raise ValueError("cart_id and variant_id are required")
    if quantity < 1:
        raise ValueError("quantity must be at least 1")

    connector = connector or get_connector()
    data = await connector.post(
        f"/store/carts/{cart_id}/line-items",
        json={"variant_id": variant_id, "quantity": quantity},
        headers=headers
    )
    logger.info(f"Added {quantity} x {variant_id} to cart {cart_id}")
    return data.get("cart") or {}
