"""
Shared fixtures for the sale tests.

The schedule used here is small and easy to reason about:

    Inactive      now < 1000
    PrivateSale   1000 .. 2000   cap 1000
    PreSale       3000 .. 4000   cap 2000
    MainSale      5000 .. 6000   cap 3000
    SaleIsOver    now > 6000
"""

import os

# Must be set before app.core.config builds the settings singleton
os.environ.setdefault("DATABASE_URL", "sqlite://:memory:")
os.environ.setdefault("AUTO_TERMINATE", "false")

import pytest
from solders.keypair import Keypair

from app.blockchain.chains.memory import InMemoryTokenLedger
from app.sale.crowdsale import Crowdsale
from app.sale.stages import StageConfig, build_schedule

OWNER_KEYPAIR = Keypair.from_seed(bytes([1] * 32))
OTHER_KEYPAIR = Keypair.from_seed(bytes([2] * 32))

OWNER = str(OWNER_KEYPAIR.pubkey())
OTHER = str(OTHER_KEYPAIR.pubkey())
ALICE = str(Keypair.from_seed(bytes([3] * 32)).pubkey())
BOB = str(Keypair.from_seed(bytes([4] * 32)).pubkey())

TOKEN_ADDRESS = "TokenMint1111111111111111111111111111111111"
TOKEN_SUPPLY = 10_000

PRIVATE_START, PRIVATE_END = 1000, 2000
PRE_START, PRE_END = 3000, 4000
MAIN_START, MAIN_END = 5000, 6000


class FakeClock:
    """Settable clock passed to the sale instead of time.time."""

    def __init__(self, now: int = 0):
        self.now = now

    def __call__(self) -> int:
        return self.now


class FailingLedger(InMemoryTokenLedger):
    """In-memory ledger whose calls can be switched to fail."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fail_transfer = False
        self.fail_burn = False
        self.transfer_calls = 0
        self.burn_calls = 0

    def transfer(self, to: str, amount: int) -> bool:
        self.transfer_calls += 1
        if self.fail_transfer:
            return False
        return super().transfer(to, amount)

    def burn_unsold_tokens(self) -> bool:
        self.burn_calls += 1
        if self.fail_burn:
            return False
        return super().burn_unsold_tokens()


def make_schedule():
    return build_schedule(
        StageConfig(price=50, hard_cap=1000, discount=50, start_date=PRIVATE_START, end_date=PRIVATE_END),
        StageConfig(price=75, hard_cap=2000, discount=25, start_date=PRE_START, end_date=PRE_END),
        StageConfig(price=100, hard_cap=3000, discount=0, start_date=MAIN_START, end_date=MAIN_END),
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(now=0)


@pytest.fixture
def ledger() -> FailingLedger:
    return FailingLedger(address=TOKEN_ADDRESS, supply=TOKEN_SUPPLY)


@pytest.fixture
def schedule():
    return make_schedule()


@pytest.fixture
def crowdsale(clock, ledger, schedule) -> Crowdsale:
    return Crowdsale(owner=OWNER, token=ledger, schedule=schedule, clock=clock)
