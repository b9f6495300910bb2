"""
Tests for the conversion graph builder.
"""

import itertools

import pytest

from ..graph import ConversionGraphBuilder, build_token_mapping
from ..registry import PoolRegistry
from ..state import BackfillCursor, PoolState
from ..types import Hop, invert_path
from ...tests.fakes import address

R = address(0x10)
X = address(0x20)
Y = address(0x30)
Z = address(0x40)
W = address(0x50)

P1 = address(0xA1)
P2 = address(0xA2)
P3 = address(0xA3)


def registry_of(*pools):
    registry = PoolRegistry()
    for pool_address, token0, token1 in pools:
        registry.register(pool_address, token0, token1, 3000, 60)
    return registry


class TestBuildTokenMapping:
    """Test cases for build_token_mapping."""

    def test_empty_registry_maps_reference_token_only(self):
        assert build_token_mapping(PoolRegistry(), R) == {R: ()}

    def test_reference_token_is_lowercased(self):
        mapping = build_token_mapping(PoolRegistry(), R.upper().replace("0X", "0x"))

        assert mapping == {R: ()}

    def test_single_hop_from_reference_token0(self):
        """P1(token0=R, token1=X) prices X through the reciprocal of P1."""
        mapping = build_token_mapping(registry_of((P1, R, X)), R)

        assert mapping[X] == (Hop(P1, reciprocal=True),)

    def test_single_hop_from_reference_token1(self):
        """P1(token0=X, token1=R) prices X directly."""
        mapping = build_token_mapping(registry_of((P1, X, R)), R)

        assert mapping[X] == (Hop(P1, reciprocal=False),)

    def test_two_hop_path(self):
        """Y is priced through P2 then P1."""
        mapping = build_token_mapping(registry_of((P1, R, X), (P2, X, Y)), R)

        assert mapping[Y] == (Hop(P2, reciprocal=True), Hop(P1, reciprocal=True))

    def test_two_hop_path_needing_second_pass(self):
        """A bridge pool scanned before its anchor is resolved on the next pass."""
        mapping = build_token_mapping(registry_of((P2, R, X), (P1, X, Y)), R)

        assert mapping[X] == (Hop(P2, reciprocal=True),)
        assert mapping[Y] == (Hop(P1, reciprocal=True), Hop(P2, reciprocal=True))

    @pytest.mark.parametrize("order", list(itertools.permutations(range(3))))
    def test_mapping_is_independent_of_registration_order(self, order):
        pools = [(P1, R, X), (P2, X, Y), (P3, Y, Z)]
        expected = build_token_mapping(registry_of(*pools), R)

        mapping = build_token_mapping(registry_of(*(pools[i] for i in order)), R)

        assert mapping == expected
        assert len(mapping[Z]) == 3

    def test_first_pool_in_address_order_wins(self):
        """With two routes to Y, the lowest pool address found first is used."""
        pools = [(P1, R, X), (P2, X, Y), (P3, R, Y)]

        mapping = build_token_mapping(registry_of(*reversed(pools)), R)

        assert mapping[Y] == (Hop(P2, reciprocal=True), Hop(P1, reciprocal=True))

    def test_unreachable_tokens_are_omitted(self):
        mapping = build_token_mapping(registry_of((P1, R, X), (P2, Z, W)), R)

        assert set(mapping) == {R, X}

    def test_unreachable_tokens_resolved_once_bridged(self):
        registry = registry_of((P1, R, X), (P2, Z, W))
        assert Z not in build_token_mapping(registry, R)

        registry.register(P3, X, Z, 500, 10)
        mapping = build_token_mapping(registry, R)

        assert mapping[Z] == (Hop(P3, reciprocal=True), Hop(P1, reciprocal=True))
        assert mapping[W] == (Hop(P2, reciprocal=True),) + mapping[Z]

    def test_rebuild_is_idempotent(self):
        registry = registry_of((P1, R, X), (P2, X, Y), (P3, Z, W))

        assert build_token_mapping(registry, R) == build_token_mapping(registry, R)

    def test_accepts_iterable_of_pools(self):
        registry = registry_of((P1, R, X))

        assert build_token_mapping(registry.all_pools(), R) == build_token_mapping(registry, R)

    def test_every_mapped_token_is_reachable(self):
        """Every hop of every path refers to a registered pool touching the token chain."""
        registry = registry_of((P1, R, X), (P2, X, Y), (P3, Z, W))
        mapping = build_token_mapping(registry, R)

        for token, path in mapping.items():
            current = token
            for hop in path:
                pool = registry.lookup(hop.pool_address)
                assert pool is not None
                current = pool.other_token(current)
            assert current == R


class TestInvertPath:
    def test_invert_path_reverses_and_flips(self):
        path = (Hop(P2, reciprocal=True), Hop(P1, reciprocal=False))

        assert invert_path(path) == (Hop(P1, reciprocal=True), Hop(P2, reciprocal=False))
        assert invert_path(()) == ()


class TestConversionGraphBuilder:
    """Test cases for ConversionGraphBuilder."""

    def test_initial_mapping(self):
        builder = ConversionGraphBuilder(R)

        assert builder.mapping == {R: ()}
        assert builder.path_for(X) is None

    def test_rebuild_replaces_mapping(self):
        builder = ConversionGraphBuilder(R)

        mapping = builder.rebuild(registry_of((P1, R, X)))

        assert builder.mapping is mapping
        assert builder.path_for(X.upper().replace("0X", "0x")) == (Hop(P1, reciprocal=True),)


class TestPoolState:
    """Test cases for PoolState."""

    def test_new_state(self):
        state = PoolState(R)

        assert state.reference_token == R
        assert len(state.registry) == 0
        assert state.token_mapping == {R: ()}
        assert state.cursor == BackfillCursor(last_scanned_block=0, fresh=False)

    def test_rebuild_mapping_uses_registry(self):
        state = PoolState(R, registry=registry_of((P1, X, R)))

        state.rebuild_mapping()

        assert state.path_for(X) == (Hop(P1, reciprocal=False),)
