"""Menu list session: filters, pagination, date filtering and mutations."""

from __future__ import annotations

import logging
import math
from datetime import date
from enum import Enum
from typing import TYPE_CHECKING, Awaitable, Callable, TypeVar

from . import daterange
from .daterange import DateRange
from .errors import (
    AuthenticationError,
    FetchError,
    MutationError,
    MutationInProgressError,
    ValidationError,
)
from .models import AggregateType, Menu, MenuForm
from .query import MenuListResult, MenuQuery

if TYPE_CHECKING:
    from .backend.client import MenuServiceClient
    from .backend.credentials import CredentialProvider
    from .config import DashboardConfig
    from .mutations import MenuMutator
    from .query import MenuQueryCoordinator

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 8
MAX_FILE_SIZE_MB = 10


class ListState(Enum):
    IDLE = "idle"
    LOADING = "loading"
    ERROR = "error"


class ViewStatus(Enum):
    NOT_LOADED = "not_loaded"
    LOADING = "loading"
    FAILED = "failed"
    EMPTY = "empty"
    READY = "ready"


class MenuListController:
    """Drives one menu list session.

    Any change to search, type, category or the date range puts the session
    back on page 1. The date range is applied client-side to the page the
    server returned, so a filtered page can hold fewer items than
    ``page_size``.
    """

    def __init__(
        self,
        coordinator: MenuQueryCoordinator,
        mutator: MenuMutator,
        page_size: int = DEFAULT_PAGE_SIZE,
        max_file_size_mb: float = MAX_FILE_SIZE_MB,
    ) -> None:
        if page_size <= 0:
            raise ValueError(f"page_size must be positive: {page_size}")
        self._coordinator = coordinator
        self._mutator = mutator
        self.page_size = page_size
        self.max_file_size_mb = max_file_size_mb

        self.page = 1
        self.search = ""
        self.type: AggregateType | None = None
        self.category = ""
        self.date_range = DateRange()

        self.state = ListState.IDLE
        self.error: Exception | None = None
        self._result: MenuListResult | None = None
        self._loads = 0
        self._issued = 0
        self._applied = 0
        self._pending: set[str] = set()

    # --- Filters and pagination ---

    @property
    def query(self) -> MenuQuery:
        return MenuQuery(
            skip=(self.page - 1) * self.page_size,
            take=self.page_size,
            search=self.search,
            type=self.type,
            category=self.category,
        )

    def set_search(self, text: str) -> None:
        self.search = text.strip()
        self.page = 1

    def set_type(self, menu_type: AggregateType | None) -> None:
        self.type = menu_type
        self.page = 1

    def set_category(self, category: str) -> None:
        self.category = category.strip()
        self.page = 1

    def set_date_range(self, selection: DateRange) -> None:
        self.date_range = selection
        self.page = 1

    def select_date(self, clicked: date) -> DateRange:
        """Feed one calendar click into the active date filter."""
        self.set_date_range(daterange.select_date(self.date_range, clicked))
        return self.date_range

    def clear_filters(self) -> None:
        self.search = ""
        self.type = None
        self.category = ""
        self.date_range = daterange.reset()
        self.page = 1

    @property
    def total(self) -> int:
        return self._result.total if self._result is not None else 0

    @property
    def total_pages(self) -> int:
        return max(1, math.ceil(self.total / self.page_size))

    def set_page(self, page: int) -> None:
        page = max(page, 1)
        if self._result is not None:
            page = min(page, self.total_pages)
        self.page = page

    def next_page(self) -> None:
        self.set_page(self.page + 1)

    def prev_page(self) -> None:
        self.set_page(self.page - 1)

    # --- Reading ---

    async def refresh(self) -> list[Menu]:
        """Load the page for the current parameters.

        Failures are recorded in ``error`` rather than raised; the last
        good page stays available. A response is dropped when its
        parameters are no longer active or when a later refresh has
        already been applied.
        """
        query = self.query
        self._issued += 1
        ticket = self._issued
        self.state = ListState.LOADING
        self._loads += 1
        try:
            result = await self._coordinator.fetch(query)
        except (FetchError, AuthenticationError) as e:
            if self._is_current(ticket, query):
                logger.warning("Loading menus failed: %s", e)
                self._applied = ticket
                self.state = ListState.ERROR
                self.error = e
            else:
                logger.debug("Ignoring failure for superseded load %s", query.key)
            return self.visible_menus
        finally:
            self._loads -= 1
            if self._loads == 0 and self.state is ListState.LOADING:
                self.state = ListState.IDLE

        if self._is_current(ticket, query):
            self._applied = ticket
            self._result = result
            self.error = None
            self.state = ListState.LOADING if self._loads else ListState.IDLE
        else:
            logger.debug("Discarding stale page for %s", query.key)

        return self.visible_menus

    def _is_current(self, ticket: int, query: MenuQuery) -> bool:
        return ticket > self._applied and query == self.query

    @property
    def menus(self) -> list[Menu]:
        """The last loaded page, before date filtering."""
        return list(self._result.menus) if self._result is not None else []

    @property
    def visible_menus(self) -> list[Menu]:
        return [m for m in self.menus if daterange.matches(self.date_range, m.created_at)]

    @property
    def view_status(self) -> ViewStatus:
        if self.state is ListState.ERROR:
            return ViewStatus.FAILED
        if self._result is None:
            if self.state is ListState.LOADING:
                return ViewStatus.LOADING
            return ViewStatus.NOT_LOADED
        return ViewStatus.READY if self.visible_menus else ViewStatus.EMPTY

    def find(self, menu_id: str) -> Menu | None:
        for menu in self.menus:
            if menu.id == menu_id:
                return menu
        return None

    # --- Mutations ---

    @property
    def pending(self) -> frozenset[str]:
        return frozenset(self._pending)

    def is_pending(self, action: str) -> bool:
        return action in self._pending

    def validate(self, form: MenuForm) -> None:
        """Check a create/update form before it is sent.

        Raises:
            ValidationError: Empty name, no file attached, or a file over
                the size limit (the message names the file).
        """
        if not form.name.strip():
            raise ValidationError("Menu name is required.")
        attached = form.attached()
        if not attached:
            raise ValidationError(
                "Please upload at least one menu file (Food, Drink, or Spa)."
            )
        limit = self.max_file_size_mb * 1024 * 1024
        for _slot, upload in attached:
            if upload.size > limit:
                raise ValidationError(
                    f'File "{upload.filename}" exceeds {self.max_file_size_mb:g} MB'
                )

    async def create_menu(self, form: MenuForm) -> Menu:
        self.validate(form)
        return await self._run_mutation("create", lambda: self._mutator.create(form))

    async def update_menu(self, menu_id: str, form: MenuForm) -> Menu:
        if not menu_id:
            raise ValidationError("Selected menu ID is missing.")
        self.validate(form)
        return await self._run_mutation(
            f"update:{menu_id}", lambda: self._mutator.update(menu_id, form)
        )

    async def delete_menu(self, menu_id: str) -> None:
        if not menu_id:
            raise ValidationError("Selected menu ID is missing.")
        await self._run_mutation(
            f"delete:{menu_id}", lambda: self._mutator.delete(menu_id)
        )

    async def _run_mutation(self, action: str, operation: Callable[[], Awaitable[T]]) -> T:
        if action in self._pending:
            raise MutationInProgressError(action)
        self._pending.add(action)
        try:
            result = await operation()
        except (MutationError, AuthenticationError) as e:
            logger.error("%s failed: %s", action, e)
            raise
        finally:
            self._pending.discard(action)

        # The mutator has already invalidated the cache; reload what is shown.
        await self.refresh()
        return result


def create_controller(
    config: DashboardConfig,
    client: MenuServiceClient,
    credentials: CredentialProvider | None = None,
) -> MenuListController:
    """Wire a coordinator, mutator and controller from configuration."""
    from .backend.credentials import create_credential_provider
    from .mutations import MenuMutator
    from .query import MenuQueryCoordinator

    if credentials is None:
        credentials = create_credential_provider(config)
    coordinator = MenuQueryCoordinator(
        client, credentials, retries=config.menus.retries
    )
    mutator = MenuMutator(client, credentials, coordinator)
    return MenuListController(
        coordinator,
        mutator,
        page_size=config.menus.page_size,
        max_file_size_mb=config.menus.max_file_size_mb,
    )
