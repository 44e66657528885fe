import pytest

from app.core.constants import NULL_ADDRESS
from app.core.errors import InvalidArgument, Unauthorized
from app.sale.events import OwnershipTransferred
from app.sale.stages import Boundary, Stage

from conftest import ALICE, MAIN_END, OTHER, OWNER


def test_construction_emits_initial_transfer(crowdsale) -> None:
    assert crowdsale.owner == OWNER
    assert crowdsale.events.of_type(OwnershipTransferred) == [
        OwnershipTransferred(previous=NULL_ADDRESS, next=OWNER)
    ]


def test_transfer_ownership(crowdsale) -> None:
    crowdsale.transfer_ownership(OWNER, OTHER)

    assert crowdsale.owner == OTHER
    assert crowdsale.events.events[-1] == OwnershipTransferred(previous=OWNER, next=OTHER)
    with pytest.raises(Unauthorized):
        crowdsale.transfer_ownership(OWNER, ALICE)


def test_transfer_requires_owner(crowdsale) -> None:
    with pytest.raises(Unauthorized):
        crowdsale.transfer_ownership(OTHER, OTHER)
    assert crowdsale.owner == OWNER


@pytest.mark.parametrize("new_owner", ["", NULL_ADDRESS])
def test_transfer_rejects_null_owner(crowdsale, new_owner) -> None:
    with pytest.raises(InvalidArgument):
        crowdsale.transfer_ownership(OWNER, new_owner)
    assert crowdsale.owner == OWNER


def test_renounce_locks_every_gated_operation(crowdsale, clock) -> None:
    crowdsale.renounce_ownership(OWNER)
    assert crowdsale.owner == NULL_ADDRESS
    assert crowdsale.events.events[-1] == OwnershipTransferred(previous=OWNER, next=NULL_ADDRESS)

    clock.now = 1500
    calls = [
        lambda: crowdsale.allocate(OWNER, ALICE, 1),
        lambda: crowdsale.set_stage_date(OWNER, Stage.MAIN_SALE, Boundary.END, MAIN_END + 10),
        lambda: crowdsale.transfer_ownership(OWNER, OTHER),
        lambda: crowdsale.renounce_ownership(OWNER),
        lambda: crowdsale.allocate(NULL_ADDRESS, ALICE, 1),
    ]
    for call in calls:
        with pytest.raises(Unauthorized):
            call()

    clock.now = MAIN_END + 1
    with pytest.raises(Unauthorized):
        crowdsale.terminate(OWNER)
    with pytest.raises(Unauthorized):
        crowdsale.terminate(NULL_ADDRESS)
