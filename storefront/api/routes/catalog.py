from fastapi import APIRouter, Depends, HTTPException, Query

from storefront.api.deps import get_content_client
from storefront.integrations.sanity import SanityClient
from storefront.schemas.catalog import SearchResponse
from storefront.services import catalog_service

router = APIRouter()


@router.get("/products")
async def list_products(content: SanityClient = Depends(get_content_client)) -> list[dict]:
    """All products, ordered by name."""
    return await catalog_service.get_all_products(content)


@router.get("/categories")
async def list_categories(content: SanityClient = Depends(get_content_client)) -> list[dict]:
    """All categories, ordered by name."""
    return await catalog_service.get_all_categories(content)


@router.get("/categories/{slug}/products")
async def list_category_products(slug: str, content: SanityClient = Depends(get_content_client)) -> list[dict]:
    """Products in a category. 404 when the category has no products."""
    products = await catalog_service.get_products_by_category(content, slug)
    if not products:
        raise HTTPException(status_code=404, detail=f"No products found in category '{slug}'")
    return products


@router.get("/search", response_model=SearchResponse)
async def search_products(
    q: str = Query(default="", max_length=100),
    content: SanityClient = Depends(get_content_client),
):
    """Search products by name prefix."""
    products = await catalog_service.search_products_by_name(content, q)
    return SearchResponse(query=q, count=len(products), products=products)
