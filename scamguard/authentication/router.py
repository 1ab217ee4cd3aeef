from fastapi import APIRouter, HTTPException, Depends, status
from fastapi.security import OAuth2PasswordRequestForm, HTTPAuthorizationCredentials
from typing import Optional
from scamguard.authentication import schemas, utils, security

router = APIRouter(prefix="/auth", tags=["authentication"])


# Signup
@router.post('/signup', response_model=schemas.SignupResponse, status_code=status.HTTP_201_CREATED)
async def signup(request: schemas.SignupRequest):
    return utils.signup(request)


# Verify signup code
@router.post('/verify', response_model=schemas.Identity)
async def verify(request: schemas.VerifyRequest):
    return utils.verify(request)


# Login
@router.post('/login', response_model=schemas.Token)
async def login(form_data: OAuth2PasswordRequestForm = Depends()):
    return utils.login(form_data.username, form_data.password)


# Logout
@router.post('/logout')
async def logout(credentials: Optional[HTTPAuthorizationCredentials] = Depends(security.bearer_scheme)):
    if credentials is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required.")
    utils.logout(credentials.credentials)
    return {"message": "Successfully logged out and token revoked."}


# Who Am I
@router.get("/me", response_model=Optional[schemas.Identity])
async def me(identity: Optional[schemas.Identity] = Depends(security.get_current_identity)):
    return identity


# REQUEST PASSWORD RESET
@router.post("/password/request")
async def request_password_reset(request: schemas.PasswordResetRequest):
    utils.request_password_reset(request.identifier)
    return {"message": "If an account exists for this identifier, a reset link has been sent."}


# CONFIRM PASSWORD RESET
@router.post("/password/reset")
async def reset_password(request: schemas.PasswordResetConfirm):
    utils.reset_password(request)
    return {"message": "Password successfully reset"}
