"""
Customer authentication helpers

Tokens are issued and validated by the commerce backend. The storefront only
forwards them: from an `Authorization: Bearer` header, or from the
`_medusa_jwt` cookie set by the storefront after login.
"""
from typing import Any, Dict, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from app.services.customer_service import retrieve_customer

AUTH_COOKIE = "_medusa_jwt"
CART_COOKIE = "_medusa_cart_id"

# Security scheme for bearer tokens
security = HTTPBearer(auto_error=False)


async def get_auth_headers(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Dict[str, str]:
    """
    Customer auth headers to forward to the commerce backend.

    Returns:
        {"authorization": "Bearer <token>"} or {} for anonymous shoppers
    """
    if credentials:
        return {"authorization": f"Bearer {credentials.credentials}"}

    token = request.cookies.get(AUTH_COOKIE)
    if token:
        return {"authorization": f"Bearer {token}"}

    return {}


async def get_current_customer(
    auth_headers: Dict[str, str] = Depends(get_auth_headers)
) -> Dict[str, Any]:
    """
    Dependency that requires a logged-in customer.

    Usage:
        @router.get("/protected")
        async def protected_route(customer: dict = Depends(get_current_customer)):
            return {"customer_id": customer["id"]}

    Raises:
        HTTPException 401 when the shopper is anonymous or the token is rejected
    """
    customer = await retrieve_customer(auth_headers)
    if not customer:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"}
        )
    return customer
