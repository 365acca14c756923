"""
Email delivery for order requests and contact messages.

The SES client is built once per process (see main.py) and passed in; no
function here constructs its own transport.
"""
import asyncio
import logging
import os
from typing import List, Protocol

import boto3
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel

from intake import (
    build_contact_notification,
    build_contact_subject,
    build_customer_confirmation,
    build_customer_confirmation_subject,
    build_order_notification,
    build_order_subject,
)
from schemas import ContactMessage, OrderRequest

logger = logging.getLogger(__name__)


class Settings(BaseModel):
    owner_email: str = "nick@itprodirect.com"
    from_email: str = "nick@itprodirect.com"
    send_customer_email: bool = False
    aws_region: str = "us-east-1"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            owner_email=os.getenv("OWNER_EMAIL", "nick@itprodirect.com"),
            from_email=os.getenv("FROM_EMAIL", "nick@itprodirect.com"),
            # Off by default: SES sandbox cannot mail unverified customers
            send_customer_email=os.getenv("SEND_CUSTOMER_EMAIL", "false").lower() == "true",
            aws_region=os.getenv("AWS_REGION", "us-east-1"),
        )


class OutboundEmail(BaseModel):
    source: str
    to: List[str]
    subject: str
    body: str


class DeliveryError(Exception):
    """The notification channel failed; the cause is logged, not relayed."""


class Mailer(Protocol):
    def send(self, email: OutboundEmail) -> None:
        ...


class SesMailer:
    def __init__(self, region: str):
        self.client = boto3.client("ses", region_name=region)

    def send(self, email: OutboundEmail) -> None:
        self.client.send_email(
            Source=email.source,
            Destination={"ToAddresses": email.to},
            Message={
                "Subject": {"Data": email.subject},
                "Body": {"Text": {"Data": email.body}},
            },
        )


async def _deliver(emails: List[OutboundEmail], mailer: Mailer) -> None:
    # All sends go out together and must all succeed
    try:
        await asyncio.gather(*(run_in_threadpool(mailer.send, e) for e in emails))
    except Exception as e:
        logger.exception("Email delivery failed (%d message(s)): %s", len(emails), e)
        raise DeliveryError("Email delivery failed") from e


def order_emails(order: OrderRequest, settings: Settings) -> List[OutboundEmail]:
    emails = [
        OutboundEmail(
            source=settings.from_email,
            to=[settings.owner_email],
            subject=build_order_subject(order),
            body=build_order_notification(order),
        )
    ]
    if settings.send_customer_email and order.customer.email:
        emails.append(
            OutboundEmail(
                source=settings.from_email,
                to=[order.customer.email],
                subject=build_customer_confirmation_subject(order),
                body=build_customer_confirmation(order, reply_to=settings.owner_email),
            )
        )
    return emails


async def send_order_notifications(order: OrderRequest, mailer: Mailer, settings: Settings) -> None:
    await _deliver(order_emails(order, settings), mailer)


async def send_contact_notification(msg: ContactMessage, mailer: Mailer, settings: Settings) -> None:
    email = OutboundEmail(
        source=settings.from_email,
        to=[settings.owner_email],
        subject=build_contact_subject(msg),
        body=build_contact_notification(msg),
    )
    await _deliver([email], mailer)
