"""
Media submission: local files via the signed-URL exchange, and social
media links via a single POST. Both return the request id that result
polling is keyed on.
"""

import asyncio
import logging
import os
from pathlib import Path
from typing import Union

from pydantic import ValidationError

from realitydefender.config import Settings
from realitydefender.core.errors import FetchFailedError, ResultParseError
from realitydefender.core.file_validator import is_valid_http_url, validate_file
from realitydefender.integrations.event_loop import BackgroundLoop
from realitydefender.integrations.http_client import HttpClient
from realitydefender.schemas.upload import SignedUrlResponse, SocialMediaResponse, UploadResponse

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


class Uploader:
    def __init__(self, http: HttpClient, loop: BackgroundLoop, config: Settings):
        self._http = http
        self._loop = loop
        self._config = config

    def upload(self, file_path: PathLike) -> UploadResponse:
        return self._loop.run(self.upload_file(file_path))

    def upload_social_media(self, url: str) -> UploadResponse:
        return self._loop.run(self.submit_social_link(url))

    async def upload_file(self, file_path: PathLike) -> UploadResponse:
        file_path = os.fspath(file_path)
        validate_file(file_path, self._config)
        file_name = os.path.basename(file_path)
        logger.info(f"[UPLOAD] Uploading file: {file_name}")

        document = await self._http.post("/api/files/aws-presigned", {"fileName": file_name})
        try:
            signed = SignedUrlResponse.model_validate(document)
        except ValidationError as e:
            raise ResultParseError("Failed to parse upload response") from e
        if not signed.signed_url or not signed.request_id:
            raise ResultParseError("Signed URL response is missing signedUrl or requestId")

        try:
            content = await asyncio.to_thread(Path(file_path).read_bytes)
        except OSError as e:
            raise FetchFailedError(f"Cannot read file: {file_name}", "INVALID_FILE") from e

        await self._http.put_bytes(signed.signed_url, content)
        logger.info(
            f"[UPLOAD] File uploaded successfully. Request ID: {signed.request_id}, "
            f"Media ID: {signed.media_id}"
        )
        return UploadResponse(request_id=signed.request_id, media_id=signed.media_id)

    async def submit_social_link(self, url: str) -> UploadResponse:
        if not is_valid_http_url(url):
            raise FetchFailedError(f"Invalid social media link: {url}", "INVALID_REQUEST")

        document = await self._http.post("/api/files/social", {"socialLink": url})
        try:
            response = SocialMediaResponse.model_validate(document)
        except ValidationError as e:
            raise ResultParseError("Failed to parse upload response") from e

        logger.info(f"[UPLOAD] Social media link uploaded successfully. Request ID: {response.request_id}")
        return UploadResponse(request_id=response.request_id)
