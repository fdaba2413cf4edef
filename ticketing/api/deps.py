from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ticketing.core.security import decode_token
from ticketing.utils.notifications import TicketNotifier, build_notifier
from ticketing.utils.payments import DummyPaymentGateway, payment_gateway

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_staff(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> dict:
    """Claims of the back-office token; admins and scanners both pass."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    claims = decode_token(credentials.credentials)
    if claims is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return claims


def get_current_admin(claims: dict = Depends(get_current_staff)) -> dict:
    if claims.get("role") != "admin":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return claims


def get_payment_gateway() -> DummyPaymentGateway:
    return payment_gateway


def get_notifier() -> TicketNotifier:
    return build_notifier()
