"""
Order-request and contact-form intake.

Submissions arrive from the browser as loosely shaped JSON. Everything here
turns that JSON into the models in schemas.py, reporting every defect at once
instead of stopping on the first one, and renders the plain-text emails the
notifier sends.
"""
import math
import os
import secrets
import string
from datetime import datetime, timezone
from typing import Any, List, Optional

from pydantic import EmailStr, TypeAdapter, ValidationError

from pricing import compute_line_total, format_currency
from schemas import Address, ContactMessage, CustomerInfo, Fulfillment, OrderItem, OrderRequest

HONEYPOT_FIELD = "website"
PHONE_MIN_LENGTH = int(os.getenv("ORDER_PHONE_MIN_LENGTH", "1"))
FULFILLMENT_METHODS = ("pickup", "ship")
ORDER_ID_ALPHABET = string.digits + string.ascii_uppercase
ORDER_ID_SUFFIX_LENGTH = 6

CONTACT_NAME_MAX = 100
CONTACT_MESSAGE_MIN = 10
CONTACT_MESSAGE_MAX = 2000

# Precedence among alias keys, first present wins
QUANTITY_KEYS = ("quantity", "qty")
UNIT_PRICE_KEYS = ("unitPrice", "price", "unit_price")
LINE_TOTAL_KEYS = ("lineTotal", "line_total")
PAYMENT_PREFERENCE_KEYS = ("payment_method", "paymentMethod", "paymentPreference")

_email_adapter = TypeAdapter(EmailStr)


class IntakeValidationError(Exception):
    """One or more field-level defects in a submission."""

    def __init__(self, details: List[str]):
        self.details = list(details)
        super().__init__("Validation failed")


class MalformedRequestError(IntakeValidationError):
    def __init__(self, detail: str = "Request body must be a JSON object"):
        super().__init__([detail])


# ---------------------- Helpers ----------------------

def _first_present(raw: dict, keys) -> Any:
    for key in keys:
        value = raw.get(key)
        if value is not None:
            return value
    return None


def _to_number(value) -> float:
    """Best-effort numeric coercion; anything unparseable becomes NaN."""
    if value is None:
        return math.nan
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def _text(value) -> str:
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return ""


def _is_valid_email(value: str) -> bool:
    try:
        _email_adapter.validate_python(value)
    except ValidationError:
        return False
    return True


def is_honeypot_triggered(payload) -> bool:
    if not isinstance(payload, dict):
        return False
    return bool(payload.get(HONEYPOT_FIELD))


# ---------------------- Order ids ----------------------

def generate_order_id(now: Optional[datetime] = None) -> str:
    """ORD-YYYYMMDD-XXXXXX using the UTC date and a random base36 suffix.

    Not collision-free; nothing downstream deduplicates.
    """
    now = now or datetime.now(timezone.utc)
    suffix = "".join(secrets.choice(ORDER_ID_ALPHABET) for _ in range(ORDER_ID_SUFFIX_LENGTH))
    return f"ORD-{now.astimezone(timezone.utc):%Y%m%d}-{suffix}"


# ---------------------- Orders ----------------------

def normalize_item(raw) -> OrderItem:
    """Coerce one submitted line item, never raising.

    Non-finite or non-positive quantities become 1 (fractions truncate),
    unusable or negative prices become 0, and a missing line total is
    computed from the normalized quantity and price.
    """
    if not isinstance(raw, dict):
        raw = {}

    quantity = _to_number(_first_present(raw, QUANTITY_KEYS))
    quantity = int(quantity) if math.isfinite(quantity) and quantity >= 1 else 1

    unit_price = _to_number(_first_present(raw, UNIT_PRICE_KEYS))
    if not math.isfinite(unit_price) or unit_price < 0:
        unit_price = 0.0

    raw_total = _first_present(raw, LINE_TOTAL_KEYS)
    if raw_total is None:
        line_total = compute_line_total(unit_price, quantity)
    else:
        line_total = _to_number(raw_total)
    # Overflowing products come back as inf
    if not math.isfinite(line_total) or line_total < 0:
        line_total = 0.0

    return OrderItem(
        sku=_text(raw.get("sku")),
        name=_text(raw.get("name")) or "Item",
        quantity=quantity,
        unit_price=unit_price,
        line_total=line_total,
    )


def _parse_address(raw) -> Optional[Address]:
    if not isinstance(raw, dict):
        return None
    return Address(**{k: _text(raw.get(k)) for k in ("street", "city", "state", "zip")})


def _payment_preference(payload: dict) -> str:
    payment = payload.get("payment")
    if isinstance(payment, dict) and payment.get("method") is not None:
        return _text(payment.get("method"))
    return _text(_first_present(payload, PAYMENT_PREFERENCE_KEYS))


def validate_order_request(
    payload,
    phone_min_length: int = PHONE_MIN_LENGTH,
    order_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> OrderRequest:
    """Validate a relaxed order request and return it normalized.

    Name, phone and at least one item are required; email is optional but
    must be well formed when given. Raises IntakeValidationError listing
    every defect found.
    """
    if not isinstance(payload, dict):
        raise MalformedRequestError()

    customer = payload.get("customer")
    if not isinstance(customer, dict):
        customer = {}
    raw_items = payload.get("items")
    items = [normalize_item(i) for i in raw_items] if isinstance(raw_items, list) else []

    name = _text(customer.get("name"))
    phone = _text(customer.get("phone"))
    email = _text(customer.get("email"))

    errors = []
    if not name:
        errors.append("Customer name is required")
    if not phone:
        errors.append("Phone number is required")
    elif len(phone) < phone_min_length:
        errors.append(f"Phone number must be at least {phone_min_length} characters")
    if email and not _is_valid_email(email):
        errors.append("Invalid email address")
    if not items:
        errors.append("Order must contain at least one item")

    raw_fulfillment = _first_present(payload, ("fulfillment", "shipping"))
    if not isinstance(raw_fulfillment, dict):
        raw_fulfillment = {}
    method = _text(raw_fulfillment.get("method")) or "pickup"
    if method not in FULFILLMENT_METHODS:
        errors.append("Fulfillment method must be 'pickup' or 'ship'")
    cost = _to_number(raw_fulfillment.get("cost"))
    if not math.isfinite(cost) or cost < 0:
        cost = 0.0

    if errors:
        raise IntakeValidationError(errors)

    now = now or datetime.now(timezone.utc)
    return OrderRequest(
        order_id=order_id or generate_order_id(now),
        created_at=now,
        customer=CustomerInfo(
            name=name,
            phone=phone,
            email=email or None,
            address=_parse_address(customer.get("address")),
        ),
        items=items,
        fulfillment=Fulfillment(method=method, cost=cost),
        payment_preference=_payment_preference(payload),
        notes=_text(payload.get("notes")),
    )


def format_item_line(item: OrderItem) -> str:
    sku_part = f" ({item.sku})" if item.sku else ""
    price_part = f" @ {format_currency(item.unit_price)}" if item.unit_price > 0 else ""
    total_part = f" = {format_currency(item.line_total)}" if item.line_total > 0 else ""
    return f"- {item.name}{sku_part} x{item.quantity}{price_part}{total_part}"


def _shipping_block(order: OrderRequest) -> str:
    if order.fulfillment.method != "ship":
        return "Local pickup / local follow-up (Palm Harbor, FL area)"
    addr = order.customer.address
    if addr is None or not any((addr.street, addr.city, addr.state, addr.zip)):
        return "Shipping address: (not provided)"
    return f"Shipping address:\n{addr.street}\n{addr.city}, {addr.state} {addr.zip}".rstrip()


def build_order_subject(order: OrderRequest) -> str:
    return f"[ORDER REQUEST] {order.order_id} - {order.customer.name}"


def build_order_notification(order: OrderRequest) -> str:
    """Plain-text owner notification for an order request."""
    items_list = "\n".join(format_item_line(i) for i in order.items)
    preference = order.payment_preference.upper() if order.payment_preference else "To be confirmed by phone"

    sections = [
        "NEW ORDER REQUEST RECEIVED",
        f"Order ID: {order.order_id}\n"
        f"Date: {order.created_at.astimezone(timezone.utc):%Y-%m-%d %H:%M:%S} UTC",
        "CUSTOMER:\n"
        f"Name: {order.customer.name}\n"
        f"Phone: {order.customer.phone}\n"
        f"Email: {order.customer.email or '(not provided)'}",
        "FULFILLMENT:\n"
        f"Method: {order.fulfillment.method.upper()}\n"
        f"{_shipping_block(order)}",
        f"ITEMS:\n{items_list}",
        f"PAYMENT:\nPreference: {preference}\n(No online payment collected)",
    ]
    if order.notes:
        sections.append(f"NOTES:\n{order.notes}")
    sections.append("---\nNext step: Call/text customer to confirm inventory, pickup/shipping, and payment.")
    return "\n\n".join(sections)


def build_customer_confirmation_subject(order: OrderRequest) -> str:
    return f"Order Request Received - {order.order_id} - IT Pro Direct"


def build_customer_confirmation(order: OrderRequest, reply_to: str) -> str:
    items_list = "\n".join(format_item_line(i) for i in order.items)
    return (
        "Thanks, we received your order request.\n\n"
        f"Order ID: {order.order_id}\n"
        "We do not take online payment. We will contact you within 24 hours to confirm "
        "availability, pickup/shipping, and payment.\n\n"
        f"ITEMS:\n{items_list}\n\n"
        f"Questions? Reply to this email or contact {reply_to}"
    )


# ---------------------- Contact ----------------------

def validate_contact(payload) -> ContactMessage:
    if not isinstance(payload, dict):
        raise MalformedRequestError()

    name = _text(payload.get("name"))
    email = _text(payload.get("email"))
    phone = _text(payload.get("phone"))
    message = _text(payload.get("message"))

    errors = []
    if not name:
        errors.append("Name is required")
    elif len(name) > CONTACT_NAME_MAX:
        errors.append(f"Name must be at most {CONTACT_NAME_MAX} characters")
    if not email:
        errors.append("Email is required")
    elif not _is_valid_email(email):
        errors.append("Invalid email format")
    if not message:
        errors.append("Message is required")
    elif len(message) < CONTACT_MESSAGE_MIN:
        errors.append(f"Message must be at least {CONTACT_MESSAGE_MIN} characters")
    elif len(message) > CONTACT_MESSAGE_MAX:
        errors.append(f"Message must be at most {CONTACT_MESSAGE_MAX} characters")

    if errors:
        raise IntakeValidationError(errors)

    return ContactMessage(name=name, email=email, phone=phone or None, message=message)


def build_contact_subject(msg: ContactMessage) -> str:
    return f"[IT Pro Direct] Contact Form: {msg.name}"


def build_contact_notification(msg: ContactMessage) -> str:
    return (
        "New contact form submission:\n\n"
        f"Name: {msg.name}\n"
        f"Email: {msg.email}\n"
        f"Phone: {msg.phone or 'Not provided'}\n\n"
        f"Message:\n{msg.message}\n\n"
        "---\n"
        "Sent from IT Pro Direct Telecom Equipment Site"
    )
