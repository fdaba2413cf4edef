from fastapi import APIRouter, HTTPException, status

from ticketing.core.security import create_access_token, verify_admin_secret
from ticketing.schemas.scanner import StaffTokenRequest, Token

router = APIRouter(prefix="/admin/auth", tags=["Admin - Auth"])


@router.post("/token", response_model=Token)
def issue_staff_token(data: StaffTokenRequest):
    """Exchange the shared back-office secret for a bearer token (admin or scanner)."""
    if not verify_admin_secret(data.secret):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid secret",
        )
    return Token(access_token=create_access_token(f"staff:{data.role}", role=data.role), role=data.role)
