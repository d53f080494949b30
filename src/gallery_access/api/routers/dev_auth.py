from __future__ import annotations

from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from starlette.status import HTTP_404_NOT_FOUND

from gallery_access.auth.deps import get_services
from gallery_access.auth.local_provider import LocalIdentityProvider
from gallery_access.services.container import Services

router = APIRouter(prefix="/v1/dev", tags=["dev"])


class DevTokenRequest(BaseModel):
    subject: str = Field(min_length=1, max_length=128)
    email: str | None = Field(default=None, max_length=320)
    name: str | None = Field(default=None, max_length=256)
    picture: str | None = Field(default=None, max_length=2048)
    ttl_minutes: int = Field(default=60, ge=1, le=24 * 60)


class DevTokenResponse(BaseModel):
    id_token: str
    token_type: str = "bearer"


@router.post("/token", response_model=DevTokenResponse)
async def mint_dev_token(
    body: DevTokenRequest,
    services: Services = Depends(get_services),
) -> DevTokenResponse:
    provider = services.provider
    if services.settings.env == "prod" or not isinstance(provider, LocalIdentityProvider):
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Not found")

    token = provider.mint_bearer_token(
        body.subject,
        email=body.email,
        name=body.name,
        picture=body.picture,
        ttl=timedelta(minutes=body.ttl_minutes),
    )
    return DevTokenResponse(id_token=token)
