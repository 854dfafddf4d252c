"""
aiohttp transport for the detection API.

One ClientSession per client, created lazily on the client's background
loop and reused by every call.

Usage (from a coroutine running on the owning loop):
    async with http.request_session() as sess:
        async with sess.get(url, headers=...) as response:
            ...

All methods return decoded JSON documents; mapping them onto SDK models
is left to the services layer. Non-2xx responses raise FetchFailedError
with the numeric status and a best-effort server message.
"""

import asyncio
import json
import logging
from contextlib import asynccontextmanager
from datetime import date
from typing import Any, Optional

import aiohttp

from realitydefender.config import Settings
from realitydefender.core.errors import FetchFailedError, ResultParseError
from realitydefender.schemas.upload import BasicResponse

logger = logging.getLogger(__name__)

# 400 responses carrying these codes are plan/quota denials, not malformed requests
_PLAN_DENIAL_CODES = ("free-tier-not-allowed", "upload-limit-reached")


class HttpClient:
    def __init__(self, config: Settings):
        self.config = config
        self.session: aiohttp.ClientSession | None = None

    def _timeout(self) -> aiohttp.ClientTimeout:
        return aiohttp.ClientTimeout(total=self.config.request_timeout_sec)

    def _headers(self, content_type: str = "application/json") -> dict:
        return {
            "X-API-KEY": self.config.api_key or "",
            "User-Agent": self.config.user_agent,
            "Content-Type": content_type,
        }

    def _url(self, endpoint: str) -> str:
        return f"{self.config.base_url.rstrip('/')}{endpoint}"

    async def initialize(self) -> None:
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(timeout=self._timeout())
            logger.info("[HTTP] Shared session initialized")

    async def close(self) -> None:
        if self.session and not self.session.closed:
            await self.session.close()
            logger.info("[HTTP] Shared session closed")
        self.session = None

    @asynccontextmanager
    async def request_session(self):
        """
        Yields the shared session, creating it on first use.

        Never closes the shared session; close() handles that.
        """
        if self.session is None or self.session.closed:
            await self.initialize()
        yield self.session

    # ------------------------------------------------------------------ #
    # Endpoints                                                           #
    # ------------------------------------------------------------------ #

    async def get_result(self, request_id: str) -> Any:
        logger.debug(f"[HTTP] Getting results for request ID: {request_id}")
        return await self._request(
            "GET", self._url(f"/api/media/users/{request_id}"), error_message="Failed to get results"
        )

    async def get_results_page(
        self,
        page_number: int,
        size: Optional[int] = None,
        name: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Any:
        params = {"size": str(size if size is not None else 10)}
        if name and name.strip():
            params["name"] = name
        if start_date is not None:
            params["startDate"] = start_date.isoformat()
        if end_date is not None:
            params["endDate"] = end_date.isoformat()

        logger.debug(f"[HTTP] Getting results page {page_number} with {params}")
        return await self._request(
            "GET",
            self._url(f"/api/v2/media/users/pages/{page_number}"),
            params=params,
            error_message="Failed to get results",
        )

    async def post(self, endpoint: str, payload: dict) -> Any:
        logger.debug(f"[HTTP] POST request to: {endpoint}")
        return await self._request(
            "POST",
            self._url(endpoint),
            json=payload,
            content_type="application/json; charset=UTF-8",
            error_message="Request failed",
        )

    async def put_bytes(self, url: str, data: bytes) -> None:
        """PUT a raw body to a pre-signed storage URL."""
        await self._request(
            "PUT",
            url,
            data=data,
            content_type="application/octet-stream",
            error_message="Failed to upload file",
            error_code="UPLOAD_FAILED",
            expect_json=False,
        )

    # ------------------------------------------------------------------ #
    # Plumbing                                                            #
    # ------------------------------------------------------------------ #

    async def _request(
        self,
        method: str,
        url: str,
        *,
        error_message: str,
        error_code: str = "SERVER_ERROR",
        content_type: str = "application/json",
        expect_json: bool = True,
        **kwargs,
    ) -> Any:
        async with self.request_session() as sess:
            try:
                async with sess.request(
                    method, url, headers=self._headers(content_type), **kwargs
                ) as response:
                    return await self._handle_response(response, expect_json)
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                logger.error(f"[HTTP] {method} {url} failed: {e!r}")
                raise FetchFailedError(error_message, error_code) from e

    async def _handle_response(self, response, expect_json: bool = True) -> Any:
        body = await response.text()
        logger.debug(f"[HTTP] Response {response.status}, body length: {len(body)}")

        if not 200 <= response.status < 300:
            basic = _parse_basic_response(body)
            logger.error(f"[HTTP] HTTP {response.status} error for URL {response.url}: {body}")
            raise FetchFailedError(
                error_message_for(response.status, basic),
                error_code_for(response.status, basic),
                status_code=response.status,
            )

        if not expect_json:
            return None
        try:
            return json.loads(body)
        except ValueError as e:
            logger.error(f"[HTTP] JSON parsing error: {e}")
            raise ResultParseError("Failed to parse response") from e


def _parse_basic_response(body: str) -> BasicResponse:
    if not body or not body.strip():
        return BasicResponse()
    try:
        return BasicResponse.model_validate_json(body)
    except ValueError:
        return BasicResponse()


def error_code_for(status_code: int, basic: BasicResponse) -> str:
    if status_code == 400:
        if basic.code in _PLAN_DENIAL_CODES:
            return "UNAUTHORIZED"
        return "INVALID_REQUEST"
    if status_code == 401:
        return "UNAUTHORIZED"
    if status_code == 404:
        return "NOT_FOUND"
    return "SERVER_ERROR"


def error_message_for(status_code: int, basic: BasicResponse) -> str:
    if status_code == 400:
        if basic.code in _PLAN_DENIAL_CODES:
            return basic.text
        return f"Invalid Request: {basic.text}"
    if status_code == 401:
        return "Invalid API key"
    if status_code == 404:
        return "Resource not found"
    return f"API error: {basic.text}"
