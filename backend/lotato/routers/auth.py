from fastapi import APIRouter, Depends, Request

from lotato.dependencies import Services, get_current_principal, get_services
from lotato.models.principal import LoginRequest, Principal
from lotato.services.activity_service import client_ip

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login")
async def login(
    body: LoginRequest,
    request: Request,
    services: Services = Depends(get_services),
):
    """Check credentials in the partition of the requested role; return a Bearer token."""
    return await services.auth.login(
        body.username, body.password, body.user_type, ip=client_ip(request)
    )


@router.get("/verify")
async def verify(principal: Principal = Depends(get_current_principal)):
    return {"valid": True, "principal": principal}
