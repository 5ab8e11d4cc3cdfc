"""
Messaging API Endpoints
Session bootstrap for the in-app inbox (TalkJS)

Endpoint:
- GET /api/v1/messaging/session - App ID, synced user and unread count

Author: MinkenWorld
Date: 2025-11-05
"""
from fastapi import APIRouter, Depends
from typing import Any, Dict
import logging

import httpx

from app.connectors.talkjs_connector import TalkJSConnector, build_talk_user
from app.core.auth import get_current_customer
from app.core.config import settings

router = APIRouter(prefix="/api/v1/messaging", tags=["Messaging"])
logger = logging.getLogger(__name__)


@router.get("/session")
async def messaging_session(customer: Dict[str, Any] = Depends(get_current_customer)):
    """
    Prepare an inbox session for the logged-in customer.

    Messaging failures never fail the request: the inbox just starts with
    an unread count of 0.
    """
    user = build_talk_user(customer)

    if not settings.messaging_configured:
        return {
            "enabled": False,
            "app_id": None,
            "user": user,
            "unread_count": 0
        }

    unread_count = 0
    try:
        connector = TalkJSConnector()
        await connector.sync_user(user)
        unread_count = await connector.get_unread_count(user["id"])
    except (httpx.HTTPError, ValueError) as e:
        logger.error(f"TalkJS request failed for user {user['id']}: {e}")

    return {
        "enabled": True,
        "app_id": settings.TALKJS_APP_ID,
        "user": user,
        "unread_count": unread_count
    }
