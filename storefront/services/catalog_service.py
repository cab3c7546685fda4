"""Catalog and order-history reads against the content backend.

Catalog reads degrade to an empty list when the content backend fails, so a
storefront page renders "no products" instead of an error. Order history
propagates failures.
"""

from typing import Any, Protocol

import structlog

from storefront.core.exceptions import ContentBackendError

logger = structlog.get_logger(__name__)

ALL_PRODUCTS_QUERY = """*[_type == "product"] | order(name asc)"""

ALL_CATEGORIES_QUERY = """*[_type == "category"] | order(name asc)"""

PRODUCT_SEARCH_QUERY = """*[
  _type == "product"
  && name match $searchParam
] | order(name asc)"""

PRODUCTS_BY_CATEGORY_QUERY = """*[
  _type == "product"
  && references(*[_type == "category" && slug.current == $categorySlug]._id)
] | order(name asc)"""

PRODUCTS_BY_IDS_QUERY = """*[_type == "product" && _id in $ids]"""

MY_ORDERS_QUERY = """*[
  _type == "order"
  && clerkUserId == $userId
] | order(orderDate desc) {
  ...,
  products[] {
    ...,
    product->
  }
}"""


class ContentQuery(Protocol):
    async def fetch(self, query: str, params: dict[str, Any] | None = None) -> Any: ...


async def _fetch_list(content: ContentQuery, query: str, event: str, **params: Any) -> list[dict]:
    try:
        result = await content.fetch(query, params or None)
    except ContentBackendError as exc:
        logger.error(event, error=str(exc), **params)
        return []
    return result or []


async def get_all_products(content: ContentQuery) -> list[dict]:
    return await _fetch_list(content, ALL_PRODUCTS_QUERY, "fetch_all_products_failed")


async def get_all_categories(content: ContentQuery) -> list[dict]:
    return await _fetch_list(content, ALL_CATEGORIES_QUERY, "fetch_all_categories_failed")


async def search_products_by_name(content: ContentQuery, search: str) -> list[dict]:
    """Prefix-match product names; an empty search matches nothing."""
    search = search.strip()
    if not search:
        return []
    return await _fetch_list(
        content,
        PRODUCT_SEARCH_QUERY,
        "search_products_failed",
        searchParam=f"{search}*",
    )


async def get_products_by_category(content: ContentQuery, category_slug: str) -> list[dict]:
    return await _fetch_list(
        content,
        PRODUCTS_BY_CATEGORY_QUERY,
        "fetch_products_by_category_failed",
        categorySlug=category_slug,
    )


async def get_products_by_ids(content: ContentQuery, product_ids: list[str]) -> dict[str, dict]:
    """Load products keyed by document ID. Raises ContentBackendError."""
    result = await content.fetch(PRODUCTS_BY_IDS_QUERY, {"ids": sorted(set(product_ids))})
    return {product["_id"]: product for product in result or []}


async def get_my_orders(content: ContentQuery, user_id: str) -> list[dict]:
    """Orders placed by a Clerk user, newest first, with product references expanded."""
    if not user_id:
        raise ValueError("user_id is required")
    result = await content.fetch(MY_ORDERS_QUERY, {"userId": user_id})
    return result or []
