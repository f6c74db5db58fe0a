"""Create, update and delete operations bound to list cache invalidation."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .errors import AuthenticationError
from .mapper import map_menu
from .models import Menu, MenuForm
from .query import MENUS_KEY

if TYPE_CHECKING:
    from .backend.client import MenuServiceClient
    from .backend.credentials import CredentialProvider
    from .query import MenuQueryCoordinator

logger = logging.getLogger(__name__)


class MenuMutator:
    """Runs menu mutations; each success invalidates the cached lists.

    Failures are never retried.
    """

    def __init__(
        self,
        client: MenuServiceClient,
        credentials: CredentialProvider,
        coordinator: MenuQueryCoordinator,
    ) -> None:
        self._client = client
        self._credentials = credentials
        self._coordinator = coordinator

    def _token(self, action: str) -> str:
        token = self._credentials.get_credential()
        if not token:
            raise AuthenticationError(f"Authentication required to {action}")
        return token

    async def create(self, form: MenuForm) -> Menu:
        token = self._token("create a menu")
        raw = await self._client.create_menu(token, form)
        self._coordinator.invalidate(MENUS_KEY)
        menu = map_menu(raw)
        logger.info("Created menu %s (%s)", menu.id, menu.name)
        return menu

    async def update(self, menu_id: str, form: MenuForm) -> Menu:
        token = self._token("update a menu")
        raw = await self._client.update_menu(token, menu_id, form)
        self._coordinator.invalidate(MENUS_KEY)
        menu = map_menu(raw)
        logger.info("Updated menu %s", menu_id)
        return menu

    async def delete(self, menu_id: str) -> None:
        token = self._token("delete a menu")
        await self._client.delete_menu(token, menu_id)
        self._coordinator.invalidate(MENUS_KEY)
        logger.info("Deleted menu %s", menu_id)
