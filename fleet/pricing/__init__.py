"""
The pricing module determines the price of a rental from the time it
took and the demographic tier of the rider. Every hour started is billed
in full, and riders in the lower tiers receive a discount on the total.

Everything in here is pure: the caller supplies the clock.
"""

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Union

TIER_DISCOUNTS = {
    1: 10,
    2: 10,
    3: 5,
    4: 5,
    5: 0,
    6: 0,
}
"""Maps a rider's tier to their discount percentage."""

CENT = Decimal("0.01")
SECONDS_PER_HOUR = 60 * 60


class InvalidRentalWindowError(ValueError):
    """Raised when a rental window is empty, reversed, or starts in the future."""


@dataclass(frozen=True)
class RentalPrice:
    """The breakdown of the price of a rental."""

    billed_hours: int
    subtotal: Decimal
    discount_percentage: int
    discount_amount: Decimal
    total_amount: Decimal


def discount_percentage(tier: Optional[int] = None) -> int:
    """
    Gets the discount percentage for a rider's tier.

    Tiers 1-2 get 10%, tiers 3-4 get 5%, and tiers 5-6
    (or riders that have not declared a tier) get nothing.
    """
    return TIER_DISCOUNTS.get(tier, 0)


def billed_hours(start: datetime, end: datetime) -> int:
    """
    The number of hours to bill for, rounding any part hour up.

    :raises InvalidRentalWindowError: If no time elapsed.
    """
    elapsed = (end - start).total_seconds()
    if elapsed <= 0:
        raise InvalidRentalWindowError(f"Rental must end after it starts ({start} to {end}).")
    return max(1, math.ceil(elapsed / SECONDS_PER_HOUR))


def _price(hours: int, hourly_rate: Union[Decimal, int, float, str], percentage: int) -> RentalPrice:
    rate = hourly_rate if isinstance(hourly_rate, Decimal) else Decimal(str(hourly_rate))
    subtotal = rate * hours
    discount = (subtotal * percentage / 100).quantize(CENT, rounding=ROUND_HALF_UP)

    return RentalPrice(
        billed_hours=hours,
        subtotal=subtotal,
        discount_percentage=percentage,
        discount_amount=discount,
        total_amount=subtotal - discount,
    )


def compute_rental_price(start: datetime, end: datetime, hourly_rate: Union[Decimal, int, float, str],
                         tier: Optional[int] = None, *, discount: int = None) -> RentalPrice:
    """
    Computes the price for a rental between two points in time.

    :param start: When the rental started.
    :param end: When the rental ended, must be after the start.
    :param hourly_rate: The base rate for an hour of riding.
    :param tier: The optional tier of the rider.
    :param discount: A discount percentage to apply instead of the tier's.
    :raises InvalidRentalWindowError: If the end is not after the start.
    """
    percentage = discount if discount is not None else discount_percentage(tier)
    return _price(billed_hours(start, end), hourly_rate, percentage)


def validate_rental_window(start: datetime, end: datetime, now: datetime = None):
    """
    Validates that a rental window is well-formed.

    :param now: The evaluation clock, defaults to the current time.
    :raises InvalidRentalWindowError: If the end is not after the start, or the start is in the future.
    """
    if end <= start:
        raise InvalidRentalWindowError("End time must be after start time.")

    if now is None:
        now = datetime.now(timezone.utc)

    if start > now:
        raise InvalidRentalWindowError("Start time cannot be in the future.")


def estimate_price(start: datetime, hourly_rate: Union[Decimal, int, float, str],
                   tier: Optional[int] = None, now: datetime = None, *, discount: int = None) -> RentalPrice:
    """
    Gets the price of a rental so far, as if it were returned now.
    A rental that has only just started costs its first hour.

    :raises InvalidRentalWindowError: If the rental starts after ``now``.
    """
    if now is None:
        now = datetime.now(timezone.utc)

    if start > now:
        raise InvalidRentalWindowError("Start time cannot be in the future.")

    elapsed = (now - start).total_seconds()
    percentage = discount if discount is not None else discount_percentage(tier)
    return _price(max(1, math.ceil(elapsed / SECONDS_PER_HOUR)), hourly_rate, percentage)
