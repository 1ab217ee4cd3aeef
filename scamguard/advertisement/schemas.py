from pydantic import BaseModel, model_validator
from typing import Optional


class AdvertisementConfig(BaseModel):
    is_enabled: bool = False
    image_url: Optional[str] = None
    target_url: Optional[str] = None

    @model_validator(mode='after')
    def enabled_requires_image_and_target(self):
        if self.is_enabled and not (self.image_url and self.target_url):
            raise ValueError('An enabled advertisement needs both an image and a target URL')
        return self
