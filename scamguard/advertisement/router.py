from fastapi import APIRouter, Depends, File, Form, UploadFile
from typing import Optional
from scamguard.advertisement import schemas, utils
from scamguard.authentication.schemas import Identity
from scamguard.authentication.security import get_current_identity

router = APIRouter(prefix="/advertisement", tags=["Advertisement"])


@router.get("/", response_model=schemas.AdvertisementConfig)
def get_advertisement():
    return utils.get_config()


@router.put("/", response_model=schemas.AdvertisementConfig)
async def save_advertisement(
    is_enabled: bool = Form(...),
    target_url: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    identity: Optional[Identity] = Depends(get_current_identity),
):
    """Admin: update the banner. Enabling it requires an image and a target URL."""
    image_data = await image.read() if image is not None else None
    return utils.save_config(
        identity,
        is_enabled=is_enabled,
        target_url=target_url,
        image_filename=image.filename if image is not None else None,
        image_data=image_data,
    )
