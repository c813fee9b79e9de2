"""Async client for the Monogram REST API."""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from monogram.config import ClientConfig
from monogram.permissions import UserRole
from monogram.session import AuthSession, Profile

log = structlog.get_logger(__name__)


class ApiError(Exception):
    """A failed API call. ``status_code`` is 0 when the server was never reached."""

    def __init__(self, message: str, status_code: int, code: str | None = None) -> None:
        self.message = message
        self.status_code = status_code
        self.code = code
        super().__init__(message)


def _error_message(response: httpx.Response) -> tuple[str, str | None]:
    try:
        body = response.json()
    except ValueError:
        return response.reason_phrase or "Request failed", None
    if not isinstance(body, dict):
        return response.reason_phrase or "Request failed", None
    detail = body.get("message") or body.get("detail")
    if isinstance(detail, list):
        # FastAPI validation errors
        detail = "; ".join(str(item.get("msg", item)) for item in detail if isinstance(item, dict))
    return str(detail or response.reason_phrase or "Request failed"), body.get("code")


def _profile(data: dict[str, Any]) -> Profile:
    return Profile(
        id=str(data["id"]),
        email=data["email"],
        name=data.get("name", ""),
        role=UserRole(data.get("role", UserRole.MEMBER.value)),
    )


class MonogramClient:
    """Thin JSON wrapper over the API that keeps an :class:`AuthSession` current."""

    def __init__(
        self,
        config: ClientConfig | None = None,
        session: AuthSession | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config or ClientConfig()
        self.session = session or AuthSession()
        self._transport = transport

    def _headers(self, token: str | None) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        token = token or self.session.access_token
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
        token: str | None = None,
    ) -> Any:
        try:
            async with httpx.AsyncClient(
                base_url=self.config.api_base_url.rstrip("/"),
                timeout=self.config.timeout,
                transport=self._transport,
            ) as client:
                resp = await client.request(
                    method, endpoint, json=json, params=params, headers=self._headers(token)
                )
        except httpx.HTTPError as exc:
            log.warning("api_network_error", method=method, endpoint=endpoint, error=str(exc))
            raise ApiError(str(exc) or "Network error", 0) from exc

        if resp.is_error:
            message, code = _error_message(resp)
            log.info("api_error", method=method, endpoint=endpoint, status=resp.status_code)
            raise ApiError(message, resp.status_code, code)
        if resp.status_code == 204 or not resp.content:
            return None
        return resp.json()

    async def get(self, endpoint: str, **params: Any) -> Any:
        return await self.request("GET", endpoint, params=params or None)

    async def post(self, endpoint: str, json: Any = None) -> Any:
        return await self.request("POST", endpoint, json=json)

    async def put(self, endpoint: str, json: Any = None) -> Any:
        return await self.request("PUT", endpoint, json=json)

    async def patch(self, endpoint: str, json: Any = None) -> Any:
        return await self.request("PATCH", endpoint, json=json)

    async def delete(self, endpoint: str) -> Any:
        return await self.request("DELETE", endpoint)

    # -- auth ----------------------------------------------------------------

    async def register(self, email: str, password: str, name: str) -> Profile:
        tokens = await self.post(
            "/auth/register", {"email": email, "password": password, "name": name}
        )
        return await self._sign_in(tokens)

    async def login(self, email: str, password: str) -> Profile:
        tokens = await self.post("/auth/login", {"email": email, "password": password})
        return await self._sign_in(tokens)

    async def _sign_in(self, tokens: dict[str, Any]) -> Profile:
        me = await self.request("GET", "/auth/me", token=tokens["access_token"])
        profile = _profile(me)
        self.session.sign_in(tokens["access_token"], tokens["refresh_token"], profile)
        return profile

    async def refresh(self) -> None:
        if not self.session.refresh_token:
            raise ApiError("Not signed in", 401)
        tokens = await self.post("/auth/refresh", {"refresh_token": self.session.refresh_token})
        self.session.token_refreshed(tokens["access_token"], tokens["refresh_token"])

    async def update_profile(self, **fields: Any) -> Profile:
        profile = _profile(await self.patch("/auth/me", fields))
        self.session.update_profile(profile)
        return profile

    def logout(self) -> None:
        self.session.sign_out()
