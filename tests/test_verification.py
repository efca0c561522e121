"""Tests for the verification poller."""

import time
from unittest.mock import AsyncMock, MagicMock

import pytest

from portainer_client import ErrorKind, Result
from portainer_client.services.verification import VerificationPoller


@pytest.fixture
def poller():
    return VerificationPoller(MagicMock(), poll_interval_ms=20)


class TestVerificationPoller:

    @pytest.mark.asyncio
    async def test_returns_true_on_first_hit(self, poller):
        lookup = AsyncMock(return_value=Result.success({"Id": 1}))

        assert await poller.verify(lookup, 1000) is True
        lookup.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_retries_until_found(self, poller):
        lookup = AsyncMock(
            side_effect=[
                Result.failure(ErrorKind.NOT_FOUND, "not yet"),
                RuntimeError("connection reset"),
                Result.success({"Id": 1}),
            ]
        )

        assert await poller.verify(lookup, 2000) is True
        assert lookup.await_count == 3

    @pytest.mark.asyncio
    async def test_non_result_values_count_as_found(self, poller):
        assert await poller.verify(AsyncMock(return_value={"Id": 1}), 500) is True
        assert await poller.verify(AsyncMock(return_value=None), 50) is False

    @pytest.mark.asyncio
    async def test_timeout_bound(self, poller):
        lookup = AsyncMock(return_value=Result.failure(ErrorKind.NOT_FOUND, "missing"))

        start = time.monotonic()
        found = await poller.verify(lookup, 200)
        elapsed = time.monotonic() - start

        assert found is False
        assert 0.2 <= elapsed < 1.0
        assert lookup.await_count >= 2

    @pytest.mark.asyncio
    async def test_zero_timeout_returns_false_without_lookup(self, poller):
        lookup = AsyncMock(return_value=Result.success(1))

        assert await poller.verify(lookup, 0) is False
        lookup.assert_not_awaited()

    @pytest.mark.parametrize("bad_timeout", [-100, "soon", float("nan"), float("inf"), True, None])
    @pytest.mark.asyncio
    async def test_invalid_timeout_uses_default(self, poller, bad_timeout):
        lookup = AsyncMock(return_value=Result.success(1))

        assert await poller.verify(lookup, bad_timeout) is True

    @pytest.mark.asyncio
    async def test_empty_names_are_rejected(self, poller):
        assert await poller.verify_stack_created("") is False
        assert await poller.verify_container_created("") is False
        poller.lookup.find_stack_by_name.assert_not_called()

    @pytest.mark.asyncio
    async def test_verify_stack_created_uses_lookup(self):
        lookup = MagicMock()
        lookup.find_stack_by_name = AsyncMock(return_value=Result.success({"Id": 9}))
        poller = VerificationPoller(lookup, poll_interval_ms=10)

        assert await poller.verify_stack_created("web", 500) is True
        lookup.find_stack_by_name.assert_awaited_once_with("web")

    @pytest.mark.asyncio
    async def test_verify_container_created_passes_environment(self):
        lookup = MagicMock()
        lookup.find_container_by_name = AsyncMock(return_value=Result.success({"Id": "c1"}))
        poller = VerificationPoller(lookup, poll_interval_ms=10)

        assert await poller.verify_container_created("web", 500, 2) is True
        lookup.find_container_by_name.assert_awaited_once_with("web", 2)


class TestClientVerification:

    @pytest.mark.asyncio
    async def test_verify_stack_created_against_server(self, client, fake_portainer):
        fake_portainer.stacks = [{"Id": 1, "Name": "web", "EndpointId": 1}]

        assert await client.verify_stack_created("web", 200) is True
        assert await client.verify_stack_created("api", 50) is False

    @pytest.mark.asyncio
    async def test_verify_container_created_against_server(self, client, fake_portainer):
        fake_portainer.add_container(Names=["/web"])

        assert await client.verify_container_created("web", 200) is True

    @pytest.mark.asyncio
    async def test_container_name_prefix_of_existing_container_counts_as_found(
        self, client, fake_portainer
    ):
        fake_portainer.add_container(Names=["/web-db"])

        assert await client.verify_container_created("web", 50) is True
