from pydantic import BaseModel


class UserRoleUpdate(BaseModel):
    is_admin: bool


class UserBanUpdate(BaseModel):
    is_banned: bool
