"""
TalkJS REST Connector
Keeps storefront customers in sync with the in-app inbox and reads unread
conversation counts.

Message delivery, presence and the inbox UI are handled by TalkJS itself.

Author: MinkenWorld
Date: 2025-11-05
"""
import logging
from typing import Any, Dict, Optional

import httpx

from app.core.config import settings

logger = logging.getLogger(__name__)


def build_talk_user(customer: Dict[str, Any]) -> Dict[str, Any]:
    """
    Map a commerce customer to a TalkJS user

    Name falls back to the email, then to "Customer".
    """
    full_name = f"{customer.get('first_name') or ''} {customer.get('last_name') or ''}".strip()
    return {
        'id': customer['id'],
        'name': full_name or customer.get('email') or "Customer",
        'email': customer.get('email') or None,
        'photoUrl': None,
        'role': "default"
    }


class TalkJSConnector:
    """
    Connector for the TalkJS REST API

    Handles:
    - User sync (create or update)
    - Unread conversation count
    """

    def __init__(
        self,
        app_id: str = None,
        secret_key: str = None,
        api_url: str = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize TalkJS connector

        Args:
            app_id: TalkJS application ID
            secret_key: TalkJS secret key (server side only)
            api_url: REST API base URL
            transport: Optional httpx transport (used by tests)
        """
        self.app_id = app_id or settings.TALKJS_APP_ID
        self.secret_key = secret_key or settings.TALKJS_SECRET_KEY

        if not self.app_id or not self.secret_key:
            raise ValueError("TalkJS credentials not configured. Set TALKJS_APP_ID and TALKJS_SECRET_KEY")

        self.api_url = f"{(api_url or settings.TALKJS_API_URL).rstrip('/')}/v1/{self.app_id}"
        self.headers = {
            'Content-Type': 'application/json',
            'Authorization': f"Bearer {self.secret_key}"
        }
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.api_url,
            headers=self.headers,
            timeout=10.0,
            transport=self._transport
        )

    async def sync_user(self, user: Dict[str, Any]):
        """Create or update a TalkJS user from a payload built by build_talk_user"""
        body = {
            'name': user['name'],
            'email': [user['email']] if user.get('email') else None,
            'photoUrl': user.get('photoUrl'),
            'role': user.get('role', 'default')
        }
        body = {k: v for k, v in body.items() if v is not None}
        async with self._client() as client:
            response = await client.put(f"/users/{user['id']}", json=body)
            response.raise_for_status()
        logger.info(f"Synced TalkJS user {user['id']}")

    async def get_unread_count(self, user_id: str) -> int:
        """Number of conversations with unread messages for a user"""
        async with self._client() as client:
            response = await client.get(
                f"/users/{user_id}/conversations",
                params={'unreadsOnly': 'true', 'limit': 100}
            )
            response.raise_for_status()
            data = response.json()

        conversations = data.get("data") if isinstance(data, dict) else None
        if not isinstance(conversations, list):
            logger.warning(f"Unexpected TalkJS conversations payload for user {user_id}")
            return 0
        return len(conversations)
