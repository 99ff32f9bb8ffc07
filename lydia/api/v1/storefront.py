from fastapi import APIRouter, Depends, Request, status

from lydia.core.config import settings
from lydia.core.rate_limiter import limiter
from lydia.db.json_db import JsonDatabase, get_db
from lydia.schemas.storefront import ContactCreate, NewsletterSubscribe
from lydia.services.storefront_service import ContactService, NewsletterService
from lydia.utils.response import success

router = APIRouter()


@router.post("/newsletter", response_model=dict)
@limiter.limit(settings.RATE_LIMIT)
def subscribe_newsletter(
    request: Request,
    subscription: NewsletterSubscribe,
    db: JsonDatabase = Depends(get_db),
):
    """Subscribe an email address; repeat subscriptions are accepted silently."""
    NewsletterService.subscribe(db, subscription.email)
    return success(message="Subscribed")


@router.post("/contact", response_model=dict, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.RATE_LIMIT)
def submit_contact(
    request: Request,
    contact: ContactCreate,
    db: JsonDatabase = Depends(get_db),
):
    record = ContactService.submit(db, contact)
    return success(data={"id": record["id"]}, message="Message received")
