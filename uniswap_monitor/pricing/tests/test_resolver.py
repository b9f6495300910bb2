"""
Tests for the price resolver.
"""

from decimal import Decimal, localcontext

import pytest

from ..resolver import PriceResolver, PriceUnavailable
from ..v3_math import PRICE_CONTEXT, Q96
from ...chain.errors import NetworkError
from ...pools.types import Hop, invert_path
from ...tests.fakes import POOL_ABI, FakeChainClient, address, sqrt_price

P1 = address(0xA1)
P2 = address(0xA2)


@pytest.fixture
def resolver(chain_client):
    return PriceResolver(chain_client, POOL_ABI)


class TestPriceResolver:
    """Test cases for PriceResolver."""

    @pytest.mark.asyncio
    async def test_empty_path_is_one(self, resolver, chain_client):
        assert await resolver.resolve(()) == Decimal(1)
        assert chain_client.calls == []

    @pytest.mark.asyncio
    async def test_hop_ratio_direct_and_reciprocal(self, resolver, chain_client):
        chain_client.sqrt_prices[P1] = sqrt_price(3)

        assert await resolver.hop_ratio(Hop(P1, reciprocal=False)) == Decimal(9)
        with localcontext(PRICE_CONTEXT):
            ninth = Decimal(1) / Decimal(9)
        assert await resolver.hop_ratio(Hop(P1, reciprocal=True)) == ninth

    @pytest.mark.asyncio
    async def test_resolve_multiplies_hops(self, resolver, chain_client):
        chain_client.sqrt_prices[P1] = sqrt_price(2)
        chain_client.sqrt_prices[P2] = sqrt_price(5)

        ratio = await resolver.resolve((Hop(P2, reciprocal=False), Hop(P1, reciprocal=True)))

        assert ratio == Decimal(25) / Decimal(4)
        assert sorted(chain_client.price_queries) == [P1, P2]

    @pytest.mark.asyncio
    async def test_convert(self, resolver, chain_client):
        chain_client.sqrt_prices[P1] = sqrt_price(2)

        assert await resolver.convert(100, (Hop(P1, reciprocal=False),)) == Decimal(400)

    @pytest.mark.asyncio
    async def test_round_trip(self, resolver, chain_client):
        """Converting along a path and back recovers the amount within rounding."""
        chain_client.sqrt_prices[P1] = 1771595571142957166518320255467520
        chain_client.sqrt_prices[P2] = 3 * Q96 + 12345678901234567
        path = (Hop(P2, reciprocal=True), Hop(P1, reciprocal=False))
        amount = 123456789012345678901234567

        converted = await resolver.convert(amount, path)
        recovered = await resolver.convert(converted, invert_path(path))

        assert abs(recovered - amount) <= Decimal(amount) * Decimal("1e-60")

    @pytest.mark.asyncio
    async def test_reverted_call_is_price_unavailable(self, resolver):
        with pytest.raises(PriceUnavailable) as exc_info:
            await resolver.resolve((Hop(P1, reciprocal=False),))
        assert exc_info.value.pool_address == P1

    @pytest.mark.asyncio
    async def test_uninitialised_pool_is_price_unavailable(self, resolver, chain_client):
        chain_client.sqrt_prices[P1] = 0

        with pytest.raises(PriceUnavailable):
            await resolver.hop_ratio(Hop(P1, reciprocal=True))

    @pytest.mark.asyncio
    async def test_chain_error_is_price_unavailable(self, resolver, chain_client):
        chain_client.set_result(P1, "slot0", NetworkError("timed out"))

        with pytest.raises(PriceUnavailable):
            await resolver.hop_ratio(Hop(P1, reciprocal=False))

    @pytest.mark.asyncio
    async def test_any_failing_hop_fails_the_path(self, resolver, chain_client):
        chain_client.sqrt_prices[P1] = sqrt_price(2)

        with pytest.raises(PriceUnavailable):
            await resolver.resolve((Hop(P2, reciprocal=False), Hop(P1, reciprocal=True)))

    @pytest.mark.asyncio
    async def test_first_failing_hop_is_reported(self, resolver, chain_client):
        chain_client.set_result(P1, "slot0", NetworkError("timed out"))

        with pytest.raises(PriceUnavailable) as exc_info:
            await resolver.resolve((Hop(P2, reciprocal=False), Hop(P1, reciprocal=True)))

        assert exc_info.value.pool_address == P2
        assert sorted(chain_client.price_queries) == sorted([P1, P2])

    def test_requires_slot0_in_abi(self):
        with pytest.raises(ValueError):
            PriceResolver(FakeChainClient(), [])
