"""Paginated, cached and de-duplicated menu list queries."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .errors import AuthenticationError, FetchError
from .mapper import map_menus
from .models import AggregateType, Menu

if TYPE_CHECKING:
    from .backend.client import MenuServiceClient
    from .backend.credentials import CredentialProvider

logger = logging.getLogger(__name__)

MENUS_KEY = "menus"


@dataclass(frozen=True)
class MenuQuery:
    """Server-side filters and pagination for one list request."""

    skip: int = 0
    take: int = 20
    search: str = ""
    type: AggregateType | None = None
    category: str = ""

    def __post_init__(self) -> None:
        if self.skip < 0:
            raise ValueError(f"skip must be non-negative: {self.skip}")
        if self.take <= 0:
            raise ValueError(f"take must be positive: {self.take}")

    @property
    def key(self) -> tuple:
        """Cache identity; every parameter takes part."""
        return (MENUS_KEY, self.skip, self.take, self.search, self.type, self.category)

    @property
    def page(self) -> int:
        return self.skip // self.take + 1

    def to_params(self) -> dict[str, str | int]:
        """Query-string parameters; empty filters are omitted."""
        params: dict[str, str | int] = {"skip": self.skip, "take": self.take}
        if self.search:
            params["search"] = self.search
        if self.type is not None:
            params["type"] = self.type.value
        if self.category:
            params["category"] = self.category
        return params


@dataclass
class MenuListResult:
    menus: list[Menu] = field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int = 20


class MenuQueryCoordinator:
    """Owns the list cache and the retry policy for menu list reads.

    Results are cached per exact parameter set. Concurrent reads of the same
    parameter set share one network call. ``invalidate()`` drops everything
    under the menus key family; a load already in flight when that happens
    still answers its callers but is not written back to the cache.
    """

    def __init__(
        self,
        client: MenuServiceClient,
        credentials: CredentialProvider,
        retries: int = 1,
        retry_delay: float = 0.0,
    ) -> None:
        self._client = client
        self._credentials = credentials
        self._retries = max(retries, 0)
        self._retry_delay = retry_delay
        self._cache: dict[tuple, MenuListResult] = {}
        self._inflight: dict[tuple, asyncio.Future] = {}
        self._generation = 0

    async def fetch(self, query: MenuQuery) -> MenuListResult:
        """Return the page for ``query``, from cache when possible.

        Raises:
            AuthenticationError: No credential, or the backend rejected it.
            FetchError: The request still failed after the retry.
        """
        token = self._credentials.get_credential()
        if not token:
            raise AuthenticationError("Unauthorized: missing token")

        key = query.key
        cached = self._cache.get(key)
        if cached is not None:
            logger.debug("Cache hit for %s", key)
            return cached

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._load(query, token, self._generation))
            self._inflight[key] = task
            task.add_done_callback(lambda t, k=key: self._forget(k, t))
        else:
            logger.debug("Joining in-flight load for %s", key)
        return await asyncio.shield(task)

    def cached(self, query: MenuQuery) -> MenuListResult | None:
        return self._cache.get(query.key)

    def invalidate(self, family: str = MENUS_KEY) -> None:
        """Drop every cached result whose key belongs to ``family``."""
        self._generation += 1
        self._cache = {k: v for k, v in self._cache.items() if k[0] != family}
        self._inflight = {k: v for k, v in self._inflight.items() if k[0] != family}
        logger.info("Invalidated cached '%s' queries", family)

    def _forget(self, key: tuple, task: asyncio.Future) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]

    async def _load(
        self, query: MenuQuery, token: str, generation: int
    ) -> MenuListResult:
        attempts = self._retries + 1
        for attempt in range(1, attempts + 1):
            try:
                raw_page = await self._client.list_menus(token, query)
                break
            except FetchError as e:
                if attempt >= attempts:
                    logger.error("List menus failed after %d attempt(s): %s", attempt, e)
                    raise
                logger.warning(
                    "List menus failed (attempt %d/%d), retrying: %s",
                    attempt, attempts, e,
                )
                if self._retry_delay:
                    await asyncio.sleep(self._retry_delay)

        result = MenuListResult(
            menus=map_menus(raw_page.data),
            total=max(raw_page.total, 0),
            page=raw_page.page if raw_page.page > 0 else query.page,
            page_size=raw_page.size if raw_page.size > 0 else query.take,
        )
        if generation == self._generation:
            self._cache[query.key] = result
        else:
            logger.debug("Discarding result loaded before invalidation: %s", query.key)
        return result
