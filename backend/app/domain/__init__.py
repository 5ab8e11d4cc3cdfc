"""
Domain Layer - Storefront Shapes

Pydantic models for the data this service returns. Business entities
themselves live in the commerce backend.

Author: MinkenWorld
Date: 2025-11-02
"""
from app.domain.product import ProductSummary, ProductListResult

__all__ = ['ProductSummary', 'ProductListResult']
