import re
import uuid
from functools import lru_cache
from typing import List

import structlog
from fastapi import Depends, Request, Response

from lydia.core.config import settings
from lydia.db.kv_store import build_cart_storage
from lydia.schemas.cart import LineItem
from lydia.services.cart_engine import CartEngine
from lydia.services.line_item_store import LineItemStore
from lydia.services.notifier import ChangeNotifier

logger = structlog.get_logger()

SESSION_ID_RE = re.compile(r"^[A-Za-z0-9_-]{8,64}$")


@lru_cache
def get_cart_storage():
    return build_cart_storage()


def get_cart_session(request: Request, response: Response) -> str:
    """Resolve the shopper's cart session, issuing a new id when absent or malformed."""
    session_id = request.headers.get(settings.CART_SESSION_HEADER)
    if not session_id or not SESSION_ID_RE.match(session_id):
        session_id = uuid.uuid4().hex
        logger.info("cart_session_issued", cart_session=session_id)

    request.state.cart_session = session_id
    response.headers[settings.CART_SESSION_HEADER] = session_id
    return session_id


def _audit_listener(session_id: str):
    def log_cart_changed(items: List[LineItem]) -> None:
        logger.info(
            "cart_changed",
            cart_session=session_id,
            lines=len(items),
            units=sum(item.quantity for item in items),
        )

    return log_cart_changed


def get_cart_engine(
    session_id: str = Depends(get_cart_session),
    storage=Depends(get_cart_storage),
) -> CartEngine:
    notifier = ChangeNotifier()
    notifier.subscribe(_audit_listener(session_id))
    store = LineItemStore(storage.for_session(session_id), notifier=notifier)
    return CartEngine(store)
