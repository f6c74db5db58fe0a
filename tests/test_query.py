"""Tests for the menu query coordinator (cache, dedupe, retry)."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from menuboard.backend.credentials import StaticCredentialProvider
from menuboard.backend.models import RawMenuPage
from menuboard.errors import AuthenticationError, FetchError
from menuboard.models import AggregateType
from menuboard.query import MENUS_KEY, MenuQuery, MenuQueryCoordinator


def _page(*ids: str, total: int | None = None) -> RawMenuPage:
    records = [
        {"id": i, "name": f"Menu {i}", "createdAt": "2025-11-10T00:00:00Z"} for i in ids
    ]
    body = {"data": {"data": records, "total": len(ids) if total is None else total}}
    return RawMenuPage.from_dict(body)


@pytest.fixture
def client():
    client = MagicMock()
    client.list_menus = AsyncMock(return_value=_page("1", "2"))
    return client


@pytest.fixture
def coordinator(client):
    return MenuQueryCoordinator(client, StaticCredentialProvider("tok"))


class TestMenuQuery:
    def test_defaults(self):
        q = MenuQuery()
        assert q.to_params() == {"skip": 0, "take": 20}
        assert q.page == 1

    def test_params_with_filters(self):
        q = MenuQuery(skip=16, take=8, search="brunch", type=AggregateType.MIXED, category="Spa")
        assert q.to_params() == {
            "skip": 16, "take": 8, "search": "brunch", "type": "MIXED", "category": "Spa",
        }
        assert q.page == 3

    def test_keys_differ_per_parameter(self):
        base = MenuQuery()
        variants = [
            MenuQuery(skip=20),
            MenuQuery(take=8),
            MenuQuery(search="x"),
            MenuQuery(type=AggregateType.PDF),
            MenuQuery(category="Spa"),
        ]
        keys = {base.key} | {v.key for v in variants}
        assert len(keys) == len(variants) + 1
        assert all(k[0] == MENUS_KEY for k in keys)

    def test_equal_queries_share_key(self):
        assert MenuQuery(search="a").key == MenuQuery(search="a").key

    def test_invalid_paging(self):
        with pytest.raises(ValueError):
            MenuQuery(skip=-1)
        with pytest.raises(ValueError):
            MenuQuery(take=0)


class TestFetch:
    @pytest.mark.asyncio
    async def test_maps_result(self, coordinator, client):
        result = await coordinator.fetch(MenuQuery(take=8))
        assert [m.id for m in result.menus] == ["1", "2"]
        assert result.total == 2
        assert result.page == 1
        assert result.page_size == 8
        client.list_menus.assert_awaited_once()
        token, query = client.list_menus.await_args.args
        assert token == "tok"
        assert query == MenuQuery(take=8)

    @pytest.mark.asyncio
    async def test_cache_hit(self, coordinator, client):
        first = await coordinator.fetch(MenuQuery())
        second = await coordinator.fetch(MenuQuery())
        assert first is second
        assert client.list_menus.await_count == 1
        assert coordinator.cached(MenuQuery()) is first

    @pytest.mark.asyncio
    async def test_distinct_params_fetch_separately(self, coordinator, client):
        await coordinator.fetch(MenuQuery())
        await coordinator.fetch(MenuQuery(search="x"))
        assert client.list_menus.await_count == 2

    @pytest.mark.asyncio
    async def test_concurrent_reads_share_one_call(self, coordinator, client):
        release = asyncio.Event()

        async def slow(token, query):
            await release.wait()
            return _page("1")

        client.list_menus.side_effect = slow

        first = asyncio.ensure_future(coordinator.fetch(MenuQuery()))
        second = asyncio.ensure_future(coordinator.fetch(MenuQuery()))
        await asyncio.sleep(0)
        release.set()
        a, b = await asyncio.gather(first, second)

        assert a is b
        assert client.list_menus.await_count == 1

    @pytest.mark.asyncio
    async def test_missing_token_makes_no_call(self, client):
        coordinator = MenuQueryCoordinator(client, StaticCredentialProvider(None))
        with pytest.raises(AuthenticationError, match="missing token"):
            await coordinator.fetch(MenuQuery())
        client.list_menus.assert_not_called()


class TestRetry:
    @pytest.mark.asyncio
    async def test_retries_once_then_succeeds(self, coordinator, client):
        client.list_menus.side_effect = [FetchError("flaky"), _page("9")]
        result = await coordinator.fetch(MenuQuery())
        assert [m.id for m in result.menus] == ["9"]
        assert client.list_menus.await_count == 2

    @pytest.mark.asyncio
    async def test_gives_up_after_one_retry(self, coordinator, client):
        client.list_menus.side_effect = FetchError("down")
        with pytest.raises(FetchError, match="down"):
            await coordinator.fetch(MenuQuery())
        assert client.list_menus.await_count == 2
        assert coordinator.cached(MenuQuery()) is None

    @pytest.mark.asyncio
    async def test_failure_is_not_cached(self, coordinator, client):
        client.list_menus.side_effect = [FetchError("a"), FetchError("b"), _page("1")]
        with pytest.raises(FetchError):
            await coordinator.fetch(MenuQuery())
        result = await coordinator.fetch(MenuQuery())
        assert [m.id for m in result.menus] == ["1"]

    @pytest.mark.asyncio
    async def test_auth_error_not_retried(self, coordinator, client):
        client.list_menus.side_effect = AuthenticationError("expired")
        with pytest.raises(AuthenticationError):
            await coordinator.fetch(MenuQuery())
        assert client.list_menus.await_count == 1

    @pytest.mark.asyncio
    async def test_zero_retries(self, client):
        coordinator = MenuQueryCoordinator(client, StaticCredentialProvider("tok"), retries=0)
        client.list_menus.side_effect = FetchError("down")
        with pytest.raises(FetchError):
            await coordinator.fetch(MenuQuery())
        assert client.list_menus.await_count == 1


class TestInvalidate:
    @pytest.mark.asyncio
    async def test_invalidate_forces_refetch(self, coordinator, client):
        await coordinator.fetch(MenuQuery())
        await coordinator.fetch(MenuQuery(search="x"))
        coordinator.invalidate(MENUS_KEY)

        assert coordinator.cached(MenuQuery()) is None
        assert coordinator.cached(MenuQuery(search="x")) is None

        await coordinator.fetch(MenuQuery())
        assert client.list_menus.await_count == 3

    @pytest.mark.asyncio
    async def test_other_family_untouched(self, coordinator, client):
        await coordinator.fetch(MenuQuery())
        coordinator.invalidate("profile")
        assert coordinator.cached(MenuQuery()) is not None

    @pytest.mark.asyncio
    async def test_load_finishing_after_invalidate_is_not_cached(self, coordinator, client):
        release = asyncio.Event()

        async def slow(token, query):
            await release.wait()
            return _page("stale")

        client.list_menus.side_effect = slow

        pending = asyncio.ensure_future(coordinator.fetch(MenuQuery()))
        await asyncio.sleep(0)
        coordinator.invalidate()
        release.set()
        result = await pending

        assert [m.id for m in result.menus] == ["stale"]
        assert coordinator.cached(MenuQuery()) is None

    @pytest.mark.asyncio
    async def test_read_after_invalidate_does_not_join_old_load(self, coordinator, client):
        release = asyncio.Event()
        calls = []

        async def slow(token, query):
            calls.append(query)
            if len(calls) == 1:
                await release.wait()
                return _page("old")
            return _page("new")

        client.list_menus.side_effect = slow

        old = asyncio.ensure_future(coordinator.fetch(MenuQuery()))
        await asyncio.sleep(0)
        coordinator.invalidate()
        fresh = await coordinator.fetch(MenuQuery())
        release.set()
        await old

        assert [m.id for m in fresh.menus] == ["new"]
        assert coordinator.cached(MenuQuery()) is fresh
