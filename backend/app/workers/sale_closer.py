"""
Sale closer worker.

Sleeps until the main sale's end date has passed, then calls ``terminate`` on
the sale as the configured owner. This burns the unsold tokens and marks the
sale over. A failed burn or an unexpected error is retried every
``terminate_retry_seconds``; other refusals (ownership moved or renounced,
sale already over) stop the worker. A sale that cannot be built from the
settings is logged and the worker exits.

The end date is re-read on every pass because the owner may still move it
while it lies in the future.
"""

import asyncio
import logging
from typing import Optional

from app.core.config import settings
from app.core.errors import AlreadyOver, ExternalFailure, SaleError, TooEarly
from app.sale.crowdsale import Crowdsale
from app.sale.stages import Stage
from app.services.sale import sale_service

logger = logging.getLogger(__name__)

# Upper bound on one sleep so edits to the end date are noticed
MAX_SLEEP_SECONDS = 3600


def _seconds_until_close(crowdsale: Crowdsale) -> int:
    """Seconds until the sale resolves to SaleIsOver (0 if it already does)."""
    close_at = crowdsale.end_date(Stage.MAIN_SALE) + 1
    return max(0, close_at - crowdsale.now())


async def _do_close(crowdsale: Crowdsale, caller: str) -> Optional[bool]:
    """
    Try to terminate once.

    Returns True when the sale is over, False when it should be retried
    later, None when the worker should give up.
    """
    if crowdsale.sale_over:
        logger.info("sale_closer: sale already terminated")
        return True

    try:
        await asyncio.to_thread(crowdsale.terminate, caller)
    except TooEarly:
        logger.info("sale_closer: main sale has not ended yet")
        return False
    except AlreadyOver:
        return True
    except ExternalFailure as e:
        logger.error(f"sale_closer: terminate failed at the token ledger: {e}")
        return False
    except SaleError as e:
        logger.error(f"sale_closer: terminate refused ({e.code}): {e}, giving up")
        return None
    except Exception as e:
        logger.error(f"sale_closer: unhandled error during terminate: {e}")
        return False

    logger.info("sale_closer: sale terminated")
    return True


async def sale_closer_loop() -> None:
    """Background loop that terminates the sale once it is over."""
    try:
        crowdsale = sale_service.crowdsale
    except Exception as e:
        logger.error(f"sale_closer: cannot build the sale, worker not started: {e}")
        return
    caller = settings.owner_address

    while True:
        wait = _seconds_until_close(crowdsale)
        if wait > 0:
            wait = min(wait, MAX_SLEEP_SECONDS)
            logger.info(f"sale_closer: next check in {wait}s")
            await asyncio.sleep(wait)
            continue

        result = await _do_close(crowdsale, caller)
        if result is not False:
            return

        logger.info(f"sale_closer: retrying in {settings.terminate_retry_seconds}s")
        await asyncio.sleep(settings.terminate_retry_seconds)
