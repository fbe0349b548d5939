"""
Payment processor webhook and credit package catalogue.
"""
from typing import List
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from adexchange.api.deps import get_db
from adexchange.config import CREDIT_PACKAGES
from adexchange.models.schemas.payments import CreditPackage
from adexchange.services.payments import (
    InvalidSignatureError,
    WebhookConfigurationError,
    handle_webhook,
)
from adexchange.utils import get_logger

router = APIRouter()
logger = get_logger(__name__)


@router.get("/packages", response_model=List[CreditPackage], summary="Credit packages")
async def list_packages() -> List[CreditPackage]:
    return [CreditPackage(id=key, **package) for key, package in CREDIT_PACKAGES.items()]


@router.post("/webhook", summary="Payment webhook")
async def payment_webhook(request: Request, db: Session = Depends(get_db)):
    raw_body = await request.body()
    signature = request.headers.get("X-CC-Webhook-Signature")

    try:
        result = handle_webhook(db, raw_body, signature)
    except WebhookConfigurationError:
        logger.error("Webhook rejected: secret or signature missing")
        return JSONResponse(status_code=500, content={"error": "Configuration Error"})
    except InvalidSignatureError:
        logger.warning("Webhook rejected: invalid signature")
        return JSONResponse(status_code=401, content={"error": "Invalid Signature"})

    return {"success": True, **result}
