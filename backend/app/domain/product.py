"""
Product Domain Models

Products are owned by the commerce backend. These models only describe the
shapes this service hands to the storefront and the shopping assistant.

Author: MinkenWorld
Date: 2025-11-02
"""
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional


class ProductSummary(BaseModel):
    """
    Compact product card used by the shopping assistant

    Fields:
        id: Backend product ID
        variant_id: First variant ID ("" when the product has no variants)
        title: Product title
        description: First 150 characters of the description (optional)
        price: Calculated amount of the first variant in the request region (0 if unknown)
        currency: Currency code of that price
        thumbnail: Thumbnail URL, falling back to the first image
        handle: URL handle of the product page
    """

    id: str = Field(..., description="Backend product ID")
    variant_id: str = Field("", description="First variant ID, used for add-to-cart")
    title: str = Field("", description="Product title")
    description: Optional[str] = Field(None, description="Truncated description")
    price: float = Field(0, description="Calculated price of the first variant")
    currency: str = Field(..., description="Currency code")
    thumbnail: str = Field("", description="Thumbnail URL")
    handle: Optional[str] = Field(None, description="Product handle")


class ProductListResult(BaseModel):
    """
    One page of catalog products

    Fields:
        products: Raw backend products for this page
        count: Number of products in the listed set
        next_page: Next page number, or None on the last page
    """

    products: List[Dict[str, Any]] = Field(default_factory=list)
    count: int = Field(0, ge=0)
    next_page: Optional[int] = None

    @classmethod
    def empty(cls) -> "ProductListResult":
        return cls(products=[], count=0, next_page=None)
