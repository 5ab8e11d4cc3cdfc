"""
Customer identity lookups

Customer accounts live in the commerce backend; the storefront only forwards
the customer's token and reads the profile back.

Author: MinkenWorld
Date: 2025-11-05
"""
import logging
from typing import Any, Dict, Optional

from app.connectors.medusa_connector import CommerceAPIError, MedusaConnector, get_connector

logger = logging.getLogger(__name__)


async def retrieve_customer(
    auth_headers: Dict[str, str],
    connector: MedusaConnector = None
) -> Optional[Dict[str, Any]]:
    """
    Get the logged-in customer.

    Args:
        auth_headers: {"authorization": "Bearer <token>"}; empty means anonymous

    Returns:
        Customer dict, or None when anonymous, unauthorized or on backend failure
    """
    if not auth_headers:
        return None

    connector = connector or get_connector()
    try:
        data = await connector.fetch(
            "/store/customers/me",
            query={"fields": "id,email,first_name,last_name"},
            headers=auth_headers
        )
    except CommerceAPIError as e:
        if e.status_code == 401:
            logger.info("Customer token rejected by commerce backend")
        else:
            logger.error(f"Failed to retrieve customer: {e}")
        return None

    return data.get("customer")
