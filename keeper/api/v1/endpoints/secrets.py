"""Secret endpoints.

- GET  /secrets     every submitted secret, anonymised
- GET  /secrets/me  the caller's own secret
- POST /secrets/me  replace the caller's secret
"""

from fastapi import APIRouter

from keeper.api.v1.schemas.secrets import SecretResponse, SecretsFeedResponse, SecretSubmitRequest
from keeper.core.deps import AuthServiceDep, OptionalUser

router = APIRouter(prefix="/secrets", tags=["Secrets"])


@router.get(
    "",
    response_model=SecretsFeedResponse,
    summary="List all secrets",
    description="Every submitted secret, without owner information.",
)
async def list_secrets(auth_service: AuthServiceDep) -> SecretsFeedResponse:
    return await auth_service.list_secrets()


@router.get(
    "/me",
    response_model=SecretResponse,
    summary="Read your secret",
)
async def read_secret(
    user: OptionalUser,
    auth_service: AuthServiceDep,
) -> SecretResponse:
    """Return the caller's secret.

    Raises:
        401 Unauthorized: If not authenticated
    """
    return await auth_service.get_secret(user)


@router.post(
    "/me",
    response_model=SecretResponse,
    summary="Submit your secret",
)
async def submit_secret(
    data: SecretSubmitRequest,
    user: OptionalUser,
    auth_service: AuthServiceDep,
) -> SecretResponse:
    """Store the caller's secret, replacing any previous one.

    Raises:
        401 Unauthorized: If not authenticated
    """
    return await auth_service.submit_secret(user, data.secret)
