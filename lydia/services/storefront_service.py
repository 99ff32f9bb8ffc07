from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import structlog

from lydia.core.exceptions import SavedCartNotFound
from lydia.db.json_db import JsonDatabase
from lydia.schemas.storefront import ContactCreate
from lydia.services.line_item_store import normalize, now_ms

logger = structlog.get_logger()


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class NewsletterService:

    @staticmethod
    def subscribe(db: JsonDatabase, email: str) -> bool:
        """Add an address to the newsletter. Returns False if already subscribed."""
        document = db.read()
        if any(entry.get("email") == email for entry in document["newsletter"]):
            return False

        document["newsletter"].append({"email": email, "subscribedAt": _utc_now_iso()})
        db.write(document)
        logger.info("newsletter_subscribed", total=len(document["newsletter"]))
        return True


class ContactService:

    @staticmethod
    def submit(db: JsonDatabase, contact: ContactCreate) -> Dict[str, Any]:
        document = db.read()
        record = {
            "id": now_ms(),
            "name": contact.name,
            "email": contact.email,
            "subject": contact.subject,
            "message": contact.message,
            "receivedAt": _utc_now_iso(),
        }
        document["contacts"].append(record)
        db.write(document)
        logger.info("contact_message_received", contact_id=record["id"])
        return record


class SavedCartService:
    """Server-side cart snapshots addressed by a client-chosen cart id."""

    @staticmethod
    def save(db: JsonDatabase, items: List[Any], cart_id: Optional[str] = None) -> tuple[str, Dict[str, Any]]:
        cart_id = cart_id or f"cart_{now_ms()}"
        normalized = normalize(items, now_ms())

        document = db.read()
        document["carts"][cart_id] = {
            "items": [item.model_dump(by_alias=True, exclude_none=True) for item in normalized],
            "updatedAt": _utc_now_iso(),
        }
        db.write(document)
        logger.info("cart_saved", cart_id=cart_id, items=len(normalized))
        return cart_id, document["carts"][cart_id]

    @staticmethod
    def get(db: JsonDatabase, cart_id: str) -> Dict[str, Any]:
        cart = db.read()["carts"].get(cart_id)
        if cart is None:
            raise SavedCartNotFound()
        return cart
