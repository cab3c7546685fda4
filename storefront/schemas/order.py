"""Pydantic schemas for checkout events and order documents."""

from datetime import datetime
from decimal import Decimal
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_serializer

CHECKOUT_SESSION_COMPLETED = "checkout.session.completed"


class WebhookEvent(BaseModel):
    """A verified payment processor event. Only ``type`` and ``data.object`` are read."""

    model_config = ConfigDict(extra="allow")

    id: str = ""
    type: str
    data: dict[str, Any] = Field(default_factory=dict)

    @property
    def data_object(self) -> Any:
        # Unvalidated: checkout sessions are checked by the materializer
        return self.data.get("object")


class CheckoutMetadata(BaseModel):
    """Metadata attached to a checkout session when it is created."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    order_number: str = Field(alias="orderNumber", min_length=1)
    customer_name: str = Field(alias="customerName")
    customer_email: str = Field(alias="customerEmail")
    clerk_user_id: str = Field(alias="clerkUserId", min_length=1)


class LineItem(BaseModel):
    """A purchased product and quantity, flattened from an expanded line item."""

    product_id: str | None = None
    quantity: int | None = None


class DocumentReference(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: Literal["reference"] = Field(default="reference", alias="_type")
    ref: str | None = Field(default=None, alias="_ref")


class OrderProduct(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    key: str = Field(alias="_key")
    product: DocumentReference
    quantity: int = 0


class OrderDocument(BaseModel):
    """The order record persisted in the content backend.

    Field aliases are the content backend's field names; dump with
    ``by_alias=True`` to get the create payload.
    """

    model_config = ConfigDict(populate_by_name=True)

    type: Literal["order"] = Field(default="order", alias="_type")
    order_number: str = Field(alias="orderNumber")
    stripe_checkout_session_id: str = Field(alias="stripeCheckoutSessionId")
    stripe_payment_intent_id: str | None = Field(default=None, alias="stripePaymentIntentId")
    customer_name: str = Field(alias="customerName")
    stripe_customer_id: str | None = Field(default=None, alias="stripeCustomerId")
    clerk_user_id: str = Field(alias="clerkUserId")
    email: str
    currency: str | None = None
    amount_discount: Decimal = Field(default=Decimal("0"), alias="amountDiscount")
    products: list[OrderProduct] = Field(default_factory=list)
    total_price: Decimal = Field(default=Decimal("0"), alias="totalPrice")
    status: Literal["paid"] = "paid"
    order_date: datetime = Field(alias="orderDate")

    @field_serializer("amount_discount", "total_price")
    def _serialize_money(self, value: Decimal) -> float | int:
        # The content backend stores numbers; keep whole amounts integral
        return int(value) if value == value.to_integral_value() else float(value)

    @field_serializer("order_date")
    def _serialize_order_date(self, value: datetime) -> str:
        return value.isoformat()

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")
