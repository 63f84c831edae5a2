"""Request-scoped inputs supplied by the auth gateway and the storefront.

Token verification happens upstream; by the time a request reaches the
marketplace the caller is identified by ``X-User-Id`` and ``X-User-Role``.
Guests are identified by the storefront's ``X-Session-Id``.
"""

from typing import Annotated

from fastapi import Depends, Header, HTTPException, Request

from marketplace.guest_cart.service import GuestCartService

ADMIN_ROLE = "admin"


def current_user_id(x_user_id: Annotated[str | None, Header()] = None) -> str:
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Authentication required")
    return x_user_id


def require_admin(
    user_id: Annotated[str, Depends(current_user_id)],
    x_user_role: Annotated[str | None, Header()] = None,
) -> str:
    if (x_user_role or "").lower() != ADMIN_ROLE:
        raise HTTPException(status_code=403, detail="Admin access required")
    return user_id


def guest_session_id(x_session_id: Annotated[str | None, Header()] = None) -> str:
    if not x_session_id:
        raise HTTPException(status_code=400, detail="X-Session-Id header is required")
    return x_session_id


def guest_cart_service(request: Request) -> GuestCartService:
    return request.app.state.guest_carts


CurrentUser = Annotated[str, Depends(current_user_id)]
AdminUser = Annotated[str, Depends(require_admin)]
GuestSession = Annotated[str, Depends(guest_session_id)]
GuestCarts = Annotated[GuestCartService, Depends(guest_cart_service)]
