"""Credit purchases confirmed by the payment processor webhook.

The processor signs the raw request body with HMAC-SHA256 (hex digest in
``X-CC-Webhook-Signature``). Only ``charge:confirmed`` events move credits;
their metadata carries ``userId`` and ``credits``.
"""
from __future__ import annotations

import hashlib
import hmac
import json
from typing import Any, Dict, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from adexchange import config
from adexchange.models.db import ProcessedCharge
from adexchange.services.eligibility import BalanceChange, adjust_balance, apply_transitions
from adexchange.services.errors import InvalidInputError, NotFoundError
from adexchange.utils import get_logger, log_business_event

logger = get_logger(__name__)

CONFIRMED_EVENT = "charge:confirmed"


class WebhookConfigurationError(Exception):
    """No webhook secret configured or no signature sent (answered with 500)."""


class InvalidSignatureError(Exception):
    """Signature does not match the body (answered with 401)."""


def compute_signature(raw_body: bytes, secret: str) -> str:
    return hmac.new(secret.encode("utf-8"), raw_body, hashlib.sha256).hexdigest()


def verify_signature(raw_body: bytes, signature: Optional[str], secret: Optional[str] = None) -> None:
    secret = secret if secret is not None else config.PAYMENT_WEBHOOK_SECRET
    if not secret or not signature:
        raise WebhookConfigurationError("Configuration Error")
    if not hmac.compare_digest(compute_signature(raw_body, secret), signature.strip()):
        raise InvalidSignatureError("Invalid Signature")


def credit_purchase(session: Session, user_id: str, credits: int, charge_id: Optional[str] = None) -> Optional[BalanceChange]:
    """Add purchased credits and reconcile eligibility if the balance crossed zero.

    Returns None when ``charge_id`` was already credited.
    """
    if credits <= 0:
        raise InvalidInputError("Purchased credits must be positive")
    try:
        if charge_id:
            session.add(ProcessedCharge(charge_id=charge_id, user_id=user_id, credits=credits))
            session.flush()
        change = adjust_balance(session, user_id, credits)
        session.commit()
    except IntegrityError:
        session.rollback()
        logger.warning("Charge already credited", charge_id=charge_id, user_id=user_id)
        return None
    except NotFoundError:
        session.rollback()
        raise
    apply_transitions(session, [change.transition()])
    log_business_event("credits_purchased", {"credits": credits, "balance": change.after}, user_id=user_id)
    return change


def handle_webhook(session: Session, raw_body: bytes, signature: Optional[str]) -> Dict[str, Any]:
    """Verify and apply one webhook delivery; returns a short summary."""
    verify_signature(raw_body, signature)
    try:
        event = json.loads(raw_body)
    except ValueError as e:
        raise InvalidInputError("Webhook body is not valid JSON") from e

    event_type = event.get("type")
    if event_type != CONFIRMED_EVENT:
        logger.info("Webhook event ignored", event_type=event_type)
        return {"processed": False, "event_type": event_type}

    data = event.get("data") or {}
    metadata = data.get("metadata") or {}
    charge_id = data.get("id") or data.get("code")
    charge_id = str(charge_id) if charge_id else None
    user_id = metadata.get("userId")
    try:
        credits = int(metadata.get("credits") or 0)
    except (TypeError, ValueError):
        credits = 0

    if not user_id or credits <= 0:
        logger.warning("Confirmed charge without usable metadata", user_id=user_id, credits=metadata.get("credits"))
        return {"processed": False, "event_type": event_type}

    change = credit_purchase(session, user_id, credits, charge_id=charge_id)
    if change is None:
        return {"processed": False, "event_type": event_type, "duplicate": True}
    logger.info("Credits added from payment", user_id=user_id, credits=credits)
    return {"processed": True, "event_type": event_type, "user_id": user_id, "balance": change.after}


__all__ = [
    "CONFIRMED_EVENT",
    "WebhookConfigurationError",
    "InvalidSignatureError",
    "compute_signature",
    "verify_signature",
    "credit_purchase",
    "handle_webhook",
]
