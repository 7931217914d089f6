from fastapi import APIRouter, Depends

from minter_service.app.core.auth import require_auth_token
from minter_service.app.services import handcash_service

router = APIRouter(prefix="/api/profile", tags=["Profile"])


@router.get("")
async def profile(auth_token: str = Depends(require_auth_token)):
    return await handcash_service.get_current_profile(auth_token)
