from fastapi import APIRouter, Depends, File, Form, UploadFile
from typing import List, Optional
from scamguard.authentication.schemas import Identity
from scamguard.authentication.security import get_current_identity
from scamguard.core.errors import Unauthenticated
from scamguard.users import management, schemas

router = APIRouter(prefix="/users", tags=["Users"])


# Own profile
@router.get("/me", response_model=Identity)
async def get_my_profile(identity: Optional[Identity] = Depends(get_current_identity)):
    if identity is None:
        raise Unauthenticated("no_session")
    return identity


@router.patch("/me", response_model=Identity)
async def update_my_profile(
    full_name: Optional[str] = Form(None),
    phone_number: Optional[str] = Form(None),
    avatar: Optional[UploadFile] = File(None),
    identity: Optional[Identity] = Depends(get_current_identity),
):
    """Update name, phone number and avatar of the signed-in user"""
    avatar_data = await avatar.read() if avatar is not None else None
    return management.update_my_profile(
        identity,
        full_name=full_name,
        phone_number=phone_number,
        avatar_filename=avatar.filename if avatar is not None else None,
        avatar_data=avatar_data,
    )


# Admin: Get all users
@router.get("/", response_model=List[Identity])
async def get_all_users(identity: Optional[Identity] = Depends(get_current_identity)):
    return management.list_users(identity)


# Admin: Grant or revoke admin role
@router.patch("/{user_id}/role", response_model=Identity)
async def update_user_role(
    user_id: str,
    update: schemas.UserRoleUpdate,
    identity: Optional[Identity] = Depends(get_current_identity),
):
    return management.update_role(user_id, update.is_admin, identity)


# Admin: Ban or unban
@router.patch("/{user_id}/ban", response_model=Identity)
async def update_user_ban_status(
    user_id: str,
    update: schemas.UserBanUpdate,
    identity: Optional[Identity] = Depends(get_current_identity),
):
    return management.update_ban_status(user_id, update.is_banned, identity)


# Admin: "Delete" bans the user
@router.delete("/{user_id}", response_model=Identity)
async def delete_user(user_id: str, identity: Optional[Identity] = Depends(get_current_identity)):
    return management.delete_user(user_id, identity)
