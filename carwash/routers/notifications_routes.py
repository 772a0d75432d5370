# carwash/routers/notifications_routes.py
# Push subscriptions and notification preferences. Delivery happens elsewhere.

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import EmailStr
from sqlmodel import Session, select

from carwash.db import get_session
from carwash.models import NotificationPreference, PushSubscription
from carwash.schemas import (
    NotificationPreferences,
    NotificationPreferencesUpdate,
    SubscriptionCreate,
    SubscriptionPublic,
    UnsubscribeRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/notifications",
    tags=["notifications"],
)


@router.post("/subscribe", response_model=SubscriptionPublic, status_code=201)
def subscribe(
    data: SubscriptionCreate,
    response: Response,
    session: Session = Depends(get_session),
):
    endpoint = str(data.endpoint)
    subscription = session.exec(
        select(PushSubscription).where(PushSubscription.endpoint == endpoint)
    ).first()

    if subscription is None:
        subscription = PushSubscription(
            endpoint=endpoint,
            p256dh=data.p256dh,
            auth=data.auth,
            user_agent=data.user_agent,
            customer_email=data.customer_email,
        )
    else:
        # Re-subscribing refreshes keys and reactivates
        subscription.p256dh = data.p256dh
        subscription.auth = data.auth
        subscription.user_agent = data.user_agent
        subscription.customer_email = data.customer_email
        subscription.is_active = True
        subscription.last_used = datetime.now()
        response.status_code = 200

    session.add(subscription)
    session.commit()
    session.refresh(subscription)

    logger.info(f"Push subscription {subscription.id} registered")
    return subscription


@router.post("/unsubscribe", response_model=SubscriptionPublic)
def unsubscribe(
    data: UnsubscribeRequest,
    session: Session = Depends(get_session),
):
    subscription = session.exec(
        select(PushSubscription).where(PushSubscription.endpoint == str(data.endpoint))
    ).first()
    if subscription is None:
        raise HTTPException(status_code=404, detail="Subscription not found")

    subscription.is_active = False
    session.add(subscription)
    session.commit()
    session.refresh(subscription)

    logger.info(f"Push subscription {subscription.id} deactivated")
    return subscription


@router.get("/preferences", response_model=NotificationPreferences)
def get_preferences(
    email: EmailStr,
    session: Session = Depends(get_session),
):
    preferences = session.get(NotificationPreference, email)
    if preferences is None:
        return NotificationPreferences(customer_email=email)
    return preferences


@router.put("/preferences", response_model=NotificationPreferences)
def update_preferences(
    data: NotificationPreferencesUpdate,
    session: Session = Depends(get_session),
):
    preferences = session.get(NotificationPreference, data.customer_email)
    if preferences is None:
        preferences = NotificationPreference(customer_email=data.customer_email)

    for key, value in data.model_dump(exclude_unset=True, exclude={"customer_email"}).items():
        if value is not None:
            setattr(preferences, key, value)

    session.add(preferences)
    session.commit()
    session.refresh(preferences)
    return preferences
