"""
Schemas for the Surplus Telecom catalog API

Products are read-only reference data loaded from data/products.json.
Order requests and contact messages are transient: they are validated,
turned into a notification email and then dropped.
"""
from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class CamelModel(BaseModel):
    # Catalog JSON and the browser forms use camelCase keys
    model_config = ConfigDict(populate_by_name=True)


class PricingTier(CamelModel):
    tier: Optional[str] = Field(None, description="single | bulk5 | bulk10")
    min_qty: int = Field(..., ge=1, alias="minQty")
    max_qty: Optional[int] = Field(None, alias="maxQty", description="None means unbounded")
    price_per_unit: float = Field(..., ge=0, alias="pricePerUnit")
    discount_percent: int = Field(0, ge=0, le=100, alias="discountPercent")


class ShippingProfile(CamelModel):
    weight: float = 0
    shippable: bool = True
    local_pickup_preferred: bool = Field(False, alias="localPickupPreferred")
    shipping_notes: str = Field("", alias="shippingNotes")


class Product(CamelModel):
    sku: str
    brand: str
    model: str = ""
    name: str
    category: Literal["radio", "antenna", "accessory"]
    short_description: str = Field("", alias="shortDescription")
    long_description: str = Field("", alias="longDescription")
    condition: Literal["new", "like-new", "tested-working", "as-is"] = "tested-working"
    condition_notes: str = Field("", alias="conditionNotes")
    quantity: int = Field(0, ge=0, description="Units on hand")
    pricing: List[PricingTier] = Field(..., min_length=1)
    images: List[str] = []
    tags: List[str] = []
    shipping: ShippingProfile = ShippingProfile()
    specs: Dict[str, str] = {}
    featured: bool = False
    active: bool = True


class OrderItem(CamelModel):
    sku: str = ""
    name: str = "Item"
    quantity: int = Field(1, gt=0)
    unit_price: float = Field(0, ge=0, alias="unitPrice")
    line_total: float = Field(0, ge=0, alias="lineTotal")


class CartTotals(CamelModel):
    subtotal: float
    paypal_fee: float = Field(alias="paypalFee")
    shipping_cost: float = Field(alias="shippingCost")
    total: float


class Address(BaseModel):
    street: str = ""
    city: str = ""
    state: str = ""
    zip: str = ""


class CustomerInfo(BaseModel):
    name: str
    phone: str
    email: Optional[str] = None
    address: Optional[Address] = None


class Fulfillment(BaseModel):
    method: Literal["pickup", "ship"] = "pickup"
    cost: float = Field(0, ge=0)


class OrderRequest(CamelModel):
    order_id: str = Field(..., alias="orderId")
    created_at: datetime = Field(..., alias="createdAt")
    customer: CustomerInfo
    items: List[OrderItem] = Field(..., min_length=1)
    fulfillment: Fulfillment = Fulfillment()
    payment_preference: str = Field("", alias="paymentPreference")
    notes: str = ""


class ContactMessage(BaseModel):
    name: str
    email: str
    phone: Optional[str] = None
    message: str


class QuoteItem(BaseModel):
    sku: str
    quantity: int = Field(1, ge=1)


class QuoteRequest(CamelModel):
    items: List[QuoteItem] = Field(..., min_length=1)
    payment_method: Literal["wire", "ach", "paypal", "cash"] = Field("wire", alias="paymentMethod")
    shipping_cost: float = Field(0, ge=0, alias="shippingCost")
