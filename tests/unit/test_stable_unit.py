"""Unit tests for the stable unit's owner-gated mint and burn."""
from __future__ import annotations

import pytest

from dsc_engine.constants import NULL_ADDRESS
from dsc_engine.errors import (
    AuthorizationError,
    BurnExceedsBalanceError,
    MintToZeroAddressError,
    NotOwnerError,
    OwnershipLockedError,
    ZeroAmountError,
)
from dsc_engine.tokens import StableUnit

OWNER = "owner"


@pytest.fixture()
def dsc() -> StableUnit:
    return StableUnit(owner=OWNER)


class TestMint:
    def test_owner_mints(self, dsc: StableUnit) -> None:
        assert dsc.mint(OWNER, "alice", 100) is True
        assert dsc.balance_of("alice") == 100
        assert dsc.total_supply == 100

    def test_non_owner_rejected(self, dsc: StableUnit) -> None:
        with pytest.raises(NotOwnerError) as exc_info:
            dsc.mint("alice", "alice", 100)
        assert exc_info.value.caller == "alice"
        assert isinstance(exc_info.value, AuthorizationError)

    def test_zero_amount_rejected(self, dsc: StableUnit) -> None:
        with pytest.raises(ZeroAmountError):
            dsc.mint(OWNER, "alice", 0)

    def test_null_recipient_rejected(self, dsc: StableUnit) -> None:
        with pytest.raises(MintToZeroAddressError):
            dsc.mint(OWNER, NULL_ADDRESS, 1)


class TestBurn:
    def test_burns_own_balance(self, dsc: StableUnit) -> None:
        dsc.mint(OWNER, OWNER, 100)
        dsc.burn(OWNER, 40)
        assert dsc.balance_of(OWNER) == 60
        assert dsc.total_supply == 60

    def test_exceeding_balance_rejected(self, dsc: StableUnit) -> None:
        dsc.mint(OWNER, OWNER, 10)
        with pytest.raises(BurnExceedsBalanceError):
            dsc.burn(OWNER, 11)

    def test_zero_rejected(self, dsc: StableUnit) -> None:
        with pytest.raises(ZeroAmountError):
            dsc.burn(OWNER, 0)

    def test_non_owner_rejected(self, dsc: StableUnit) -> None:
        with pytest.raises(NotOwnerError):
            dsc.burn("alice", 1)


class TestOwnership:
    def test_transfer_once(self, dsc: StableUnit) -> None:
        dsc.transfer_ownership(OWNER, "engine")
        assert dsc.owner == "engine"
        with pytest.raises(NotOwnerError):
            dsc.mint(OWNER, "alice", 1)

    def test_second_transfer_rejected(self, dsc: StableUnit) -> None:
        dsc.transfer_ownership(OWNER, "engine")
        with pytest.raises(OwnershipLockedError):
            dsc.transfer_ownership("engine", "other")

    def test_null_owner_rejected(self, dsc: StableUnit) -> None:
        with pytest.raises(ValueError):
            dsc.transfer_ownership(OWNER, NULL_ADDRESS)

    def test_restore_includes_owner(self, dsc: StableUnit) -> None:
        state = dsc.snapshot()
        dsc.transfer_ownership(OWNER, "engine")
        dsc.restore(state)
        assert dsc.owner == OWNER
        dsc.transfer_ownership(OWNER, "engine")
