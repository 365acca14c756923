"""
Client for the contact and order-request endpoints.

Network failures are reported separately from errors the server sends back,
and nothing is retried automatically.
"""
import logging
import os
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel

from intake import generate_order_id

logger = logging.getLogger(__name__)

API_URL = os.getenv("API_URL", "")

CONTACT_NETWORK_ERROR = "Network error. Please try again or email us directly."
ORDER_NETWORK_ERROR = "Network error. Please try again or contact us directly."
MOCK_CONTACT_MESSAGE = "Thank you for your message. We'll respond within 24 hours."
MOCK_ORDER_MESSAGE = "Order request received! We'll contact you to confirm details and payment."


class ApiResponse(BaseModel):
    success: bool
    message: Optional[str] = None
    error: Optional[str] = None
    details: Optional[List[str]] = None
    data: Optional[Dict[str, Any]] = None


class CatalogClient:
    def __init__(self, base_url: str = API_URL, http: Optional[httpx.Client] = None):
        self.base_url = base_url.rstrip("/")
        self.http = http or httpx.Client()

    def _post(self, path: str, data: dict, default_error: str, network_error: str) -> ApiResponse:
        try:
            response = self.http.post(f"{self.base_url}{path}", json=data)
            result = response.json()
        except (httpx.TransportError, ValueError) as e:
            logger.error("Submission to %s failed: %s", path, e)
            return ApiResponse(success=False, error=network_error)
        if not isinstance(result, dict):
            result = {}

        if not response.is_success:
            return ApiResponse(
                success=False,
                error=result.get("error") or default_error,
                details=result.get("details"),
            )
        return ApiResponse(success=True, message=result.get("message"), data=result)

    def submit_contact_form(self, data: dict) -> ApiResponse:
        if not self.base_url:
            logger.warning("API_URL not configured - using mock response")
            return ApiResponse(
                success=True,
                message=MOCK_CONTACT_MESSAGE,
                data={"success": True, "message": MOCK_CONTACT_MESSAGE},
            )
        return self._post("/contact", data, "Failed to send message", CONTACT_NETWORK_ERROR)

    def submit_order_request(self, data: dict) -> ApiResponse:
        if not self.base_url:
            logger.warning("API_URL not configured - using mock response")
            return ApiResponse(
                success=True,
                message=MOCK_ORDER_MESSAGE,
                data={"success": True, "orderId": generate_order_id(), "message": MOCK_ORDER_MESSAGE},
            )
        return self._post("/orders", data, "Failed to process order request", ORDER_NETWORK_ERROR)
