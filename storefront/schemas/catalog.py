"""Pydantic schemas for catalog, checkout and order-history responses."""

from typing import Any

from pydantic import BaseModel, Field


class SearchResponse(BaseModel):
    query: str
    count: int = 0
    products: list[dict[str, Any]] = Field(default_factory=list, description="Matching products, empty when none")


class BasketItem(BaseModel):
    product_id: str = Field(min_length=1)
    quantity: int = Field(gt=0)


class CheckoutRequest(BaseModel):
    items: list[BasketItem] = Field(min_length=1)


class CheckoutResponse(BaseModel):
    checkout_url: str
    session_id: str
    order_number: str
