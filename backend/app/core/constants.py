# Null identity: the all-zero Solana public key
NULL_ADDRESS = "11111111111111111111111111111111"

# Token precision (smallest units per whole token)
TOKEN_DECIMALS = 10**9
DECIMALS = 9

UINT8_MAX = 2**8 - 1
UINT64_MAX = 2**64 - 1
UINT256_MAX = 2**256 - 1

# Default stage economics (deployment constants)
# fmt: off
PRIVATE_SALE_START = 1798761600   # 2027-01-01 00:00 UTC
PRIVATE_SALE_END   = 1801353600   # 2027-01-31 00:00 UTC
PRE_SALE_START     = 1802649600   # 2027-02-15 00:00 UTC
PRE_SALE_END       = 1805068800   # 2027-03-15 00:00 UTC
MAIN_SALE_START    = 1806537600   # 2027-04-01 00:00 UTC
MAIN_SALE_END      = 1811721600   # 2027-05-31 00:00 UTC

PRIVATE_SALE_PRICE = 50
PRE_SALE_PRICE     = 75
MAIN_SALE_PRICE    = 100

PRIVATE_SALE_CAP   = 50_000_000 * TOKEN_DECIMALS
PRE_SALE_CAP       = 100_000_000 * TOKEN_DECIMALS
MAIN_SALE_CAP      = 150_000_000 * TOKEN_DECIMALS

PRIVATE_SALE_DISCOUNT = 50
PRE_SALE_DISCOUNT     = 25
MAIN_SALE_DISCOUNT    = 0
# fmt: on


def is_null_address(address) -> bool:
    """Return True for the null identity (None, empty or the zero key)."""
    return not address or address == NULL_ADDRESS
