"""
Cart API Endpoints
Add-to-cart for product cards (including the ones shown by the shopping assistant)

Endpoint:
- POST /api/cart/line-items - Add a variant to the shopper's cart

Author: MinkenWorld
Date: 2025-11-05
"""
from fastapi import APIRouter, Depends, HTTPException, Request, Response
from pydantic import BaseModel, Field
from typing import Dict
import logging

from app.connectors.medusa_connector import CommerceAPIError
from app.core.auth import CART_COOKIE, get_auth_headers
from app.core.config import settings
from app.services.cart_service import add_line_item, create_cart
from app.services.region_service import get_region

router = APIRouter(prefix="/api/cart", tags=["Cart"])
logger = logging.getLogger(__name__)

CART_COOKIE_MAX_AGE = 60 * 60 * 24 * 7


class LineItemRequest(BaseModel):
    variant_id: str = Field(..., min_length=1)
    quantity: int = Field(1, ge=1, le=100)


@router.post("/line-items")
async def add_to_cart(
    body: LineItemRequest,
    request: Request,
    response: Response,
    auth_headers: Dict[str, str] = Depends(get_auth_headers)
):
    """
    Add a variant to the cart stored in the `_medusa_cart_id` cookie.

    When the shopper has no cart yet, one is created in the default region
    and its ID is set as a cookie.
    """
    headers = auth_headers or None
    cart_id = request.cookies.get(CART_COOKIE)

    try:
        if not cart_id:
            region = await get_region(settings.DEFAULT_REGION)
            cart = await create_cart(region.get("id") if region else None, headers=headers)
            cart_id = cart.get("id")
            if not cart_id:
                raise HTTPException(status_code=502, detail="Could not create a cart")
            response.set_cookie(
                CART_COOKIE,
                cart_id,
                max_age=CART_COOKIE_MAX_AGE,
                httponly=True,
                samesite="strict"
            )

        cart = await add_line_item(cart_id, body.variant_id, body.quantity, headers=headers)

    except CommerceAPIError as e:
        logger.error(f"Add to cart failed (cart={cart_id}, variant={body.variant_id}): {e}")
        if e.status_code and 400 <= e.status_code < 500:
            raise HTTPException(status_code=e.status_code, detail="The cart rejected this item")
        raise HTTPException(status_code=502, detail="Cart service unavailable")

    return {
        "status": "success",
        "cart_id": cart_id,
        "data": cart
    }
