"""Slot occupancy rules for a single day.

Each period occupies a set of half-day slots. Two bookings on the same date
conflict when their slot sets overlap, so ``both`` collides with everything
and ``morning`` only collides with ``morning`` or ``both``.
"""

from .models import Period

MORNING_SLOT = 'morning'
EVENING_SLOT = 'evening'

SLOTS_BY_PERIOD = {
    Period.MORNING: frozenset({MORNING_SLOT}),
    Period.EVENING: frozenset({EVENING_SLOT}),
    Period.BOTH: frozenset({MORNING_SLOT, EVENING_SLOT}),
}

ALL_SLOTS = SLOTS_BY_PERIOD[Period.BOTH]

DAY_FREE = 'free'
DAY_PARTIAL = 'partial'
DAY_FULL = 'full'


def slots_for(period):
    """Return the slots occupied by ``period``; raises ValueError for unknown values."""
    return SLOTS_BY_PERIOD[Period(period)]


def periods_conflict(existing, candidate):
    return bool(slots_for(existing) & slots_for(candidate))


def has_conflict(existing_periods, candidate):
    return any(periods_conflict(period, candidate) for period in existing_periods)


def occupied_slots(periods):
    occupied = frozenset()
    for period in periods:
        occupied |= slots_for(period)
    return occupied


def available_periods(existing_periods):
    """Periods that could still be booked, in display order."""
    occupied = occupied_slots(existing_periods)
    return [period for period in Period if not slots_for(period) & occupied]


def day_status(existing_periods):
    occupied = occupied_slots(existing_periods)
    if not occupied:
        return DAY_FREE
    if occupied == ALL_SLOTS:
        return DAY_FULL
    return DAY_PARTIAL
