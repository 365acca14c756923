import json
import logging
import os
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from catalog import (
    get_brands,
    get_categories,
    get_featured_products,
    get_product_by_sku,
    get_products,
    get_products_by_brand,
    get_products_by_category,
    get_site_metadata,
)
from intake import (
    IntakeValidationError,
    MalformedRequestError,
    generate_order_id,
    is_honeypot_triggered,
    validate_contact,
    validate_order_request,
)
from notifier import DeliveryError, Mailer, SesMailer, Settings, send_contact_notification, send_order_notifications
from pricing import (
    compute_cart_totals,
    compute_line_total,
    format_currency,
    price_for_quantity,
    pricing_table,
    resolve_tier,
    tier_label,
)
from schemas import QuoteRequest

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
logger = logging.getLogger(__name__)

app = FastAPI(title="IT Pro Direct Catalog API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["POST", "OPTIONS", "GET"],
    allow_headers=["Content-Type"],
)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}

CONTACT_SUCCESS = "Thank you for your message. We'll respond within 24 hours."
CONTACT_FAILURE = "Failed to send message. Please try again."
ORDER_SUCCESS = "Order request received! We'll contact you to confirm details and payment."
ORDER_FAILURE = "Failed to process order. Please try again or contact us directly."

# ----------------------- Mail transport -----------------------
# One client per process, handed to routes through Depends
app_settings = Settings.from_env()
ses_mailer = SesMailer(region=app_settings.aws_region)


def get_settings() -> Settings:
    return app_settings


def get_mailer() -> Mailer:
    return ses_mailer


# ----------------------- Errors -----------------------
def validation_failed(details) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"success": False, "error": "Validation failed", "details": list(details)},
    )


@app.exception_handler(IntakeValidationError)
async def intake_validation_handler(request: Request, exc: IntakeValidationError):
    return validation_failed(exc.details)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    details = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ())[1:])
        details.append(f"{loc}: {err.get('msg')}" if loc else err.get("msg"))
    return validation_failed(details)


async def read_json_body(request: Request):
    raw = await request.body()
    if not raw:
        return {}
    try:
        return json.loads(raw)
    except ValueError:
        raise MalformedRequestError()


def server_error(message: str) -> JSONResponse:
    return JSONResponse(status_code=500, content={"success": False, "error": message})


# ----------------------- Health -----------------------
@app.get("/")
def root():
    return {"message": "IT Pro Direct catalog API running"}


# ----------------------- Catalog -----------------------
@app.get("/products")
def list_products(brand: Optional[str] = None, category: Optional[str] = None, featured: Optional[bool] = None):
    items = get_products_by_brand(brand) if brand else get_products()
    if category:
        in_category = {p.sku for p in get_products_by_category(category)}
        items = [p for p in items if p.sku in in_category]
    if featured is not None:
        items = [p for p in items if p.featured == featured]
    return [p.model_dump(by_alias=True) for p in items]


@app.get("/products/featured")
def list_featured_products():
    return [p.model_dump(by_alias=True) for p in get_featured_products()]


@app.get("/products/{sku}")
def get_product(sku: str):
    product = get_product_by_sku(sku)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product.model_dump(by_alias=True)


@app.get("/products/{sku}/pricing")
def get_product_pricing(sku: str, quantity: int = Query(1, ge=1)):
    product = get_product_by_sku(sku)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    tier = resolve_tier(product.pricing, quantity)
    unit_price = price_for_quantity(product.pricing, quantity)
    line_total = compute_line_total(unit_price, quantity)
    return {
        "sku": product.sku,
        "quantity": quantity,
        "tiers": pricing_table(product.pricing),
        "tier": tier_label(tier) if tier else None,
        "discountPercent": tier.discount_percent if tier else 0,
        "unitPrice": unit_price,
        "unitPriceDisplay": format_currency(unit_price),
        "lineTotal": line_total,
        "lineTotalDisplay": format_currency(line_total),
    }


@app.get("/brands")
def list_brands():
    return {"brands": get_brands()}


@app.get("/categories")
def list_categories():
    return {"categories": get_categories()}


@app.get("/meta")
def site_metadata():
    return get_site_metadata()


# ----------------------- Cart quote -----------------------
@app.post("/cart/quote")
def quote_cart(body: QuoteRequest):
    lines = []
    errors = []
    for item in body.items:
        product = get_product_by_sku(item.sku)
        if not product:
            errors.append(f"Unknown product SKU: {item.sku}")
            continue
        unit_price = price_for_quantity(product.pricing, item.quantity)
        lines.append({
            "sku": product.sku,
            "name": product.name,
            "quantity": item.quantity,
            "unitPrice": unit_price,
            "lineTotal": compute_line_total(unit_price, item.quantity),
        })
    if errors:
        raise IntakeValidationError(errors)

    totals = compute_cart_totals(lines, body.payment_method, body.shipping_cost)
    return {
        "items": lines,
        "paymentMethod": body.payment_method,
        **totals.model_dump(by_alias=True),
        "totalDisplay": format_currency(totals.total),
    }


# ----------------------- Contact -----------------------
@app.options("/contact")
@app.options("/orders")
def preflight():
    return Response(status_code=200, content="", headers=CORS_HEADERS)


@app.post("/contact")
async def submit_contact(
    request: Request,
    mailer: Mailer = Depends(get_mailer),
    settings: Settings = Depends(get_settings),
):
    payload = await read_json_body(request)

    if is_honeypot_triggered(payload):
        logger.info("Honeypot triggered, ignoring contact submission")
        return {"success": True, "message": "Thank you for your message."}

    msg = validate_contact(payload)
    try:
        await send_contact_notification(msg, mailer, settings)
    except DeliveryError:
        return server_error(CONTACT_FAILURE)
    return {"success": True, "message": CONTACT_SUCCESS}


# ----------------------- Orders -----------------------
@app.post("/orders")
async def submit_order(
    request: Request,
    mailer: Mailer = Depends(get_mailer),
    settings: Settings = Depends(get_settings),
):
    payload = await read_json_body(request)

    if is_honeypot_triggered(payload):
        logger.info("Honeypot triggered, ignoring order request")
        return {"success": True, "orderId": generate_order_id(), "message": ORDER_SUCCESS}

    order = validate_order_request(payload)
    try:
        await send_order_notifications(order, mailer, settings)
    except DeliveryError:
        return server_error(ORDER_FAILURE)

    logger.info("Order request %s accepted (%d item(s))", order.order_id, len(order.items))
    return {"success": True, "orderId": order.order_id, "message": ORDER_SUCCESS}


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
