"""
Catalog navigation endpoints: categories, collections, regions

Author: MinkenWorld
Date: 2025-11-02
"""
from fastapi import APIRouter, HTTPException, Query

from app.services.category_service import get_category_by_handle, list_categories
from app.services.collection_service import get_collection_by_handle, list_collections
from app.services.region_service import get_region, list_regions

router = APIRouter(prefix="/api/v1", tags=["Catalog"])


@router.get("/categories")
async def get_categories(limit: int = Query(100, ge=1, le=500)):
    """Category navigation tree (parents and main categories with children)"""
    tree = await list_categories({"limit": limit})
    return {
        "status": "success",
        "data": tree
    }


@router.get("/categories/{handle}")
async def get_category(handle: str):
    category = await get_category_by_handle(handle)
    if not category:
        raise HTTPException(status_code=404, detail=f"Category '{handle}' not found")
    return {"status": "success", "data": category}


@router.get("/collections")
async def get_collections(
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0)
):
    """Collections ordered by rank, then title"""
    result = await list_collections({"limit": limit, "offset": offset})
    return {
        "status": "success",
        "count": result["count"],
        "data": result["collections"]
    }


@router.get("/collections/{handle}")
async def get_collection(handle: str):
    collection = await get_collection_by_handle(handle)
    if not collection:
        raise HTTPException(status_code=404, detail=f"Collection '{handle}' not found")
    return {"status": "success", "data": collection}


@router.get("/regions")
async def get_regions():
    regions = await list_regions()
    return {
        "status": "success",
        "count": len(regions),
        "data": regions
    }


@router.get("/regions/{country_code}")
async def get_region_by_country(country_code: str):
    region = await get_region(country_code)
    if not region:
        raise HTTPException(status_code=404, detail=f"No region serves '{country_code}'")
    return {"status": "success", "data": region}
