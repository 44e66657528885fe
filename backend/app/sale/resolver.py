"""Map a point in time to the active sale stage."""

from app.sale.stages import ACTIVE_STAGES, Schedule, Stage


def resolve(schedule: Schedule, now: int) -> Stage:
    """Return the stage active at ``now``. Pure; first match wins."""
    if now < schedule[Stage.PRIVATE_SALE].start_date:
        return Stage.INACTIVE
    if now < schedule[Stage.PRE_SALE].start_date:
        return Stage.PRIVATE_SALE
    if now < schedule[Stage.MAIN_SALE].start_date:
        return Stage.PRE_SALE
    if now <= schedule[Stage.MAIN_SALE].end_date:
        return Stage.MAIN_SALE
    return Stage.SALE_IS_OVER


def is_sale_active(schedule: Schedule, now: int) -> bool:
    return resolve(schedule, now) in ACTIVE_STAGES
