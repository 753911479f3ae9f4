from fastapi import APIRouter, Depends

from storefront.api.deps import get_identity_gate, get_token, to_http
from storefront.domain.errors import StorefrontError
from storefront.services.identity_service import IdentityGate

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/logout", status_code=204)
def logout(
    token: str | None = Depends(get_token),
    gate: IdentityGate = Depends(get_identity_gate),
):
    try:
        gate.sign_out(token)
    except StorefrontError as e:
        raise to_http(e)
