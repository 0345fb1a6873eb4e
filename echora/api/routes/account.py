"""
Account Routes - the user's own completion API key.

The stored key is never sent back; clients only see whether one is on
file and a masked hint.
"""
from fastapi import APIRouter, Depends

from echora.auth.gate import require_user
from echora.core.logging_config import get_logger, mask_secret
from echora.database.profile_store import ProfileStore
from echora.dependencies import get_completion_client, get_profile_store
from echora.llm.client import CompletionClient
from echora.models.auth import AuthUser
from echora.models.settings import AccountResponse, ApiKeyInput

logger = get_logger(__name__)

router = APIRouter(prefix="/account", tags=["Account"])


def _account_response(user: AuthUser, api_key) -> AccountResponse:
    return AccountResponse(
        email=user.email,
        has_api_key=bool(api_key),
        api_key_hint=mask_secret(api_key) or None,
    )


@router.get("", response_model=AccountResponse, summary="Account status")
def get_account(
    user: AuthUser = Depends(require_user),
    store: ProfileStore = Depends(get_profile_store),
) -> AccountResponse:
    return _account_response(user, store.get_api_key(user.id))


@router.put("/api-key", response_model=AccountResponse, summary="Save your own API key")
def save_api_key(
    payload: ApiKeyInput,
    user: AuthUser = Depends(require_user),
    store: ProfileStore = Depends(get_profile_store),
    client: CompletionClient = Depends(get_completion_client),
) -> AccountResponse:
    """Store the key; the Echo uses it for this user's calls from now on."""
    previous = store.get_api_key(user.id)
    store.save_api_key(user.id, payload.api_key)
    if previous and previous != payload.api_key:
        client.forget_key(previous)
    return _account_response(user, payload.api_key)
