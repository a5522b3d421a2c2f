# Paystack helper - SERVER SIDE ONLY
# Wraps /transaction/initialize and /transaction/verify and builds the
# sanitized config the buyer side is allowed to see.

import time, random, string, logging
import requests
from urllib.parse import quote

import settings

logger = logging.getLogger(__name__)

_REF_CHARS = string.ascii_uppercase + string.digits


def _headers():
    return {"Authorization": f"Bearer {settings.PAYSTACK_SECRET_KEY}", "Content-Type": "application/json"}


def make_reference(prefix="PRJ"):
    """Unique transaction reference, e.g. ``PRJ_1718000000000_K3F9QZ``."""
    suffix = "".join(random.choice(_REF_CHARS) for _ in range(6))
    return f"{prefix}_{int(time.time() * 1000)}_{suffix}"


def initialize_transaction(email, item_id, item_name, callback_url=None, prefix="PRJ", extra_metadata=None):
    """Start a fixed-price NGN transaction for one document.

    Returns ``{"success": True, "data": {...}}`` with Paystack's
    ``authorization_url``/``access_code``/``reference``, or
    ``{"success": False, "error": "..."}``. Never raises.
    """
    metadata = {
        "custom_fields": [
            {"display_name": "Project", "variable_name": "project_name", "value": item_name},
            {"display_name": "Project ID", "variable_name": "project_id", "value": item_id},
        ],
        "project_id": item_id,
        "project_name": item_name,
    }
    if extra_metadata:
        metadata.update(extra_metadata)

    payload = {
        "email": email,
        "amount": settings.FIXED_PRICE_KOBO,
        "currency": settings.CURRENCY,
        "reference": make_reference(prefix),
        "metadata": metadata,
    }
    callback_url = callback_url or settings.CALLBACK_URL
    if callback_url:
        payload["callback_url"] = callback_url

    try:
        r = requests.post(f"{settings.PAYSTACK_API}/transaction/initialize", json=payload,
                          headers=_headers(), timeout=settings.REQUEST_TIMEOUT)
        res = r.json()
    except (requests.RequestException, ValueError) as e:
        logger.warning(f"Paystack initialize failed for {item_id}: {e}")
        return {"success": False, "error": str(e)}

    if res.get("status"):
        logger.info(f"Initialized {payload['reference']} for {item_id}")
        return {"success": True, "data": res.get("data")}
    logger.warning(f"Paystack refused initialize for {item_id}: {res.get('message')}")
    return {"success": False, "error": res.get("message") or "Transaction could not be initialized"}


def verify_transaction(reference):
    """Ask Paystack whether ``reference`` was paid."""
    if not reference:
        return {"success": False, "error": "reference is required"}

    try:
        r = requests.get(f"{settings.PAYSTACK_API}/transaction/verify/{quote(reference, safe='')}",
                         headers=_headers(), timeout=settings.REQUEST_TIMEOUT)
        res = r.json()
    except (requests.RequestException, ValueError) as e:
        logger.warning(f"Paystack verify failed for {reference}: {e}")
        return {"success": False, "error": str(e)}

    data = res.get("data") or {}
    if res.get("status") and data.get("status") == "success":
        metadata = data.get("metadata") or {}
        return {
            "success": True,
            "verified": True,
            "projectId": metadata.get("project_id"),
            "projectName": metadata.get("project_name"),
            "reference": data.get("reference"),
            "amount": data.get("amount", 0) / 100,
            "metadata": metadata,
        }
    logger.info(f"Transaction {reference} not verified (status={data.get('status')})")
    return {"success": True, "verified": False, "status": data.get("status")}


def get_public_config():
    # Only what the browser/buyer may see: no secret key here
    return {
        "PAYSTACK_PUBLIC_KEY": settings.PAYSTACK_PUBLIC_KEY,
        "FIXED_PRICE": settings.FIXED_PRICE_KOBO // 100,
        "PRICE_KOBO": settings.FIXED_PRICE_KOBO,
        "CURRENCY": settings.CURRENCY,
        "FILES": dict(settings.LGA_FILES),
    }
