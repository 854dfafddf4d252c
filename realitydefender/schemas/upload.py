from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )


class BasicResponse(_WireModel):
    """Envelope the API wraps around errors and simple acknowledgements."""

    code: str = ""
    response: str = ""
    message: str = ""
    errno: int = 0

    @property
    def text(self) -> str:
        return self.response or self.message


class SignedUrlData(_WireModel):
    signed_url: Optional[str] = None


class SignedUrlResponse(_WireModel):
    code: str = ""
    errno: int = 0
    response: Optional[SignedUrlData] = None
    media_id: Optional[str] = None
    request_id: Optional[str] = None

    @property
    def signed_url(self) -> Optional[str]:
        return self.response.signed_url if self.response else None


class SocialMediaResponse(_WireModel):
    request_id: str
    code: str = ""
    response: str = ""
    errno: int = 0


class UploadResponse(BaseModel):
    """Identifiers of a submitted job. media_id is None for social media links."""

    model_config = ConfigDict(frozen=True)

    request_id: str
    media_id: Optional[str] = None
