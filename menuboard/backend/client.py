"""Async REST client for the backend menu service."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx

from ..config import DEFAULT_BASE_URL
from ..errors import AuthenticationError, FetchError, MutationError
from .models import RawMenu, RawMenuPage

if TYPE_CHECKING:
    from ..models import MenuForm
    from ..query import MenuQuery

logger = logging.getLogger(__name__)


def _error_message(response: httpx.Response) -> str:
    """Pull the server's ``message`` field, falling back to the raw body."""
    try:
        body = response.json()
    except ValueError:
        return response.text.strip() or response.reason_phrase
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return response.reason_phrase


def _check_response(
    response: httpx.Response,
    error_cls: type[FetchError] | type[MutationError],
    action: str,
) -> None:
    if response.status_code in (401, 403):
        raise AuthenticationError(
            f"{action} rejected by backend: {_error_message(response)}"
        )
    if response.is_error:
        raise error_cls(
            f"{action} failed ({response.status_code}): {_error_message(response)}"
        )


def _record(body: Any, action: str) -> RawMenu:
    data = body.get("data") if isinstance(body, dict) else None
    if not isinstance(data, dict):
        raise MutationError(f"{action} returned no menu record")
    return RawMenu.from_dict(data)


class MenuServiceClient:
    """Thin wrapper over the menu endpoints.

    The bearer token is passed per call; this class never looks it up.
    Usable as an async context manager.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> MenuServiceClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    @staticmethod
    def _headers(token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token}"}

    async def _send(
        self,
        method: str,
        path: str,
        token: str,
        error_cls: type[FetchError] | type[MutationError],
        action: str,
        **kwargs: Any,
    ) -> httpx.Response:
        logger.debug("%s %s", method, path)
        try:
            response = await self._get_client().request(
                method, path, headers=self._headers(token), **kwargs
            )
        except httpx.HTTPError as e:
            raise error_cls(f"{action} failed: {e}") from e
        _check_response(response, error_cls, action)
        return response

    async def list_menus(self, token: str, query: MenuQuery) -> RawMenuPage:
        """GET /menu/user for one page of the user's menus."""
        response = await self._send(
            "GET", "/menu/user", token, FetchError, "List menus",
            params=query.to_params(),
        )
        try:
            return RawMenuPage.from_dict(response.json())
        except ValueError as e:
            raise FetchError(f"List menus returned invalid JSON: {e}") from e

    async def get_menu(self, token: str, menu_id: str) -> RawMenu:
        response = await self._send(
            "GET", f"/menu/{menu_id}", token, FetchError, "Get menu"
        )
        try:
            body = response.json()
        except ValueError as e:
            raise FetchError(f"Get menu returned invalid JSON: {e}") from e
        data = body.get("data") if isinstance(body, dict) else None
        if not isinstance(data, dict):
            raise FetchError(f"Get menu returned no record for {menu_id}")
        return RawMenu.from_dict(data)

    async def create_menu(self, token: str, form: MenuForm) -> RawMenu:
        """POST /menu as a multipart form."""
        response = await self._send(
            "POST", "/menu", token, MutationError, "Create menu",
            **self._multipart(form),
        )
        return _record(self._json(response, "Create menu"), "Create menu")

    async def update_menu(self, token: str, menu_id: str, form: MenuForm) -> RawMenu:
        response = await self._send(
            "PUT", f"/menu/{menu_id}", token, MutationError, "Update menu",
            **self._multipart(form),
        )
        return _record(self._json(response, "Update menu"), "Update menu")

    async def delete_menu(self, token: str, menu_id: str) -> None:
        await self._send(
            "DELETE", f"/menu/{menu_id}", token, MutationError, "Delete menu"
        )

    @staticmethod
    def _json(response: httpx.Response, action: str) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise MutationError(f"{action} returned invalid JSON: {e}") from e

    @staticmethod
    def _multipart(form: MenuForm) -> dict[str, Any]:
        data: dict[str, str] = {"name": form.name}
        if form.review_link:
            data["reviewLink"] = form.review_link
        if form.description:
            data["description"] = form.description
        if form.category:
            data["category"] = form.category

        files = {
            slot.field_name: (
                upload.filename,
                upload.content,
                upload.content_type or "application/octet-stream",
            )
            for slot, upload in form.attached()
        }
        return {"data": data, "files": files}
