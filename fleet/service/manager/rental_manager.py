"""
Rental Manager
--------------

This module is what handles all the rentals in the system.

Responsibilities
================

This object handles everything needed for bike rentals.

- starting a rental
- returning (finishing) a rental, and billing it
- cancelling a rental
- getting active rentals
- estimating rental price

Each transition runs in a single transaction. The rows it guards are
read with ``select_for_update`` in the order rider, rental, bicycle so
two transitions never wait on each other in a cycle.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Union, Optional

from shapely.geometry import Point
from tortoise.transactions import in_transaction

from fleet import logger, config
from fleet.events import EventHub, EventList
from fleet.models import Bicycle, Rental, User, Payment
from fleet.models.util import BicycleStatus, RentalStatus, PaymentStatus, PaymentMethod, resolve_id
from fleet.pricing import compute_rental_price, estimate_price, discount_percentage, RentalPrice
from fleet.service.access.bicycles import get_bicycle
from fleet.service.access.rentals import get_rental, get_active_rental
from fleet.service.access.users import get_user
from fleet.service.errors import RiderNotFoundError, RiderAlreadyRentingError, BicycleNotFoundError, \
    BicycleNotAvailableError, RentalNotFoundError, RentalNotActiveError


MINIMUM_RENTAL = timedelta(microseconds=1)
"""A rental always ends at least this long after it started, even when the clocks disagree."""


class RentalEvent(EventList):

    def rental_started(self, user: User, bike: Bicycle, rental: Rental):
        """A new rental was started."""

    def rental_ended(self, user: User, bike: Bicycle, rental: Rental, price: RentalPrice):
        """A rental was returned and paid for."""

    def rental_cancelled(self, user: User, bike: Bicycle, rental: Rental):
        """A rental was cancelled."""


class RentalManager:
    """
    Handles the lifecycle of the rental in the system.

    Also publishes events on its hub once a transition is committed,
    so that other modules can stay up to date with the system.

    :param discount_at_return: Whether to price a returned rental with the
     rider's tier at the time of return, rather than the discount fixed
     when the rental started.
    """

    def __init__(self, *, discount_at_return: bool = None):
        self.discount_at_return = config.discount_at_return if discount_at_return is None else discount_at_return
        self.hub = EventHub(RentalEvent)

    async def start(self, rider: Union[User, int], bicycle: Union[Bicycle, int], *,
                    start_location: Point = None) -> Rental:
        """
        Starts a new rental for a rider.

        :param start_location: Where the rental starts, defaults to the bicycle's last known location.
        :raises RiderNotFoundError: If the rider does not exist.
        :raises RiderAlreadyRentingError: If the rider currently has a rental active.
        :raises BicycleNotFoundError: If the bicycle does not exist.
        :raises BicycleNotAvailableError: If the bicycle is rented, in maintenance, or retired.
        """
        async with in_transaction() as connection:
            user = await get_user(rider, using_db=connection, lock=True)
            if user is None:
                raise RiderNotFoundError(f"No such rider {resolve_id(rider)}.")

            active = await get_active_rental(user, using_db=connection)
            if active is not None:
                logger.debug("Rider %s tried to rent while renting (rental %s)", user.id, active.id)
                raise RiderAlreadyRentingError(f"Rider {user.id} already has an active rental.", active.id)

            bike = await get_bicycle(bicycle, using_db=connection, lock=True)
            if bike is None:
                raise BicycleNotFoundError(f"No such bicycle {resolve_id(bicycle)}.")
            if not bike.is_available:
                logger.debug("Rider %s tried to rent %s", user.id, bike)
                raise BicycleNotAvailableError(f"Bicycle {bike.code} is {bike.status.value}.", bike.status)

            rental = Rental(
                user=user,
                bike=bike,
                start_time=datetime.now(timezone.utc),
                base_rate=bike.hourly_rate,
                discount_percentage=discount_percentage(user.tier),
            )
            rental.start_location = start_location if start_location is not None else bike.location
            await rental.save(using_db=connection)

            bike.transition(BicycleStatus.RENTED)
            if start_location is not None:
                bike.location = start_location
            await bike.save(using_db=connection)

        logger.info("Rider %s started rental %s of %s", user.id, rental.id, bike.code)
        self.hub.emit(RentalEvent.rental_started, user, bike, rental)
        return rental

    async def finish(self, rental: Union[Rental, int], *, end_location: Point = None,
                     payment_method: PaymentMethod = PaymentMethod.CARD, transaction_id: str = None) -> Rental:
        """
        Returns a rental, billing the rider for every hour started.

        A completed payment is written for the total.

        :param end_location: Where the bicycle was left, defaults to its last known location.
        :raises RentalNotFoundError: If the rental does not exist.
        :raises RentalNotActiveError: If the rental is already completed or cancelled.
        """
        async with in_transaction() as connection:
            instance, user, bike = await self._lock_rental(rental, connection)

            now = max(datetime.now(timezone.utc), instance.start_time + MINIMUM_RENTAL)
            if self.discount_at_return:
                price = compute_rental_price(instance.start_time, now, instance.base_rate, user.tier)
            else:
                price = compute_rental_price(instance.start_time, now, instance.base_rate,
                                             discount=instance.discount_percentage)

            instance.transition(RentalStatus.COMPLETED)
            instance.payment_status.assert_transition(PaymentStatus.PAID)
            instance.payment_status = PaymentStatus.PAID
            instance.end_time = now
            instance.end_location = end_location if end_location is not None else bike.location
            instance.billed_hours = price.billed_hours
            instance.subtotal = price.subtotal
            instance.discount_percentage = price.discount_percentage
            instance.discount_amount = price.discount_amount
            instance.total_amount = price.total_amount
            await instance.save(using_db=connection)

            bike.transition(BicycleStatus.AVAILABLE)
            if end_location is not None:
                bike.location = end_location
            await bike.save(using_db=connection)

            await Payment.create(
                rental=instance, amount=price.total_amount, method=payment_method,
                transaction_id=transaction_id, using_db=connection,
            )

        logger.info("Rider %s returned rental %s of %s for %s", user.id, instance.id, bike.code, price.total_amount)
        self.hub.emit(RentalEvent.rental_ended, user, bike, instance, price)
        return instance

    async def cancel(self, rental: Union[Rental, int]) -> Rental:
        """
        Cancels a rental, effective immediately, waiving the rental fee.

        :raises RentalNotFoundError: If the rental does not exist.
        :raises RentalNotActiveError: If the rental is already completed or cancelled.
        """
        async with in_transaction() as connection:
            instance, user, bike = await self._lock_rental(rental, connection)

            instance.transition(RentalStatus.CANCELLED)
            instance.payment_status.assert_transition(PaymentStatus.CANCELLED)
            instance.payment_status = PaymentStatus.CANCELLED
            instance.end_time = datetime.now(timezone.utc)
            await instance.save(using_db=connection)

            bike.transition(BicycleStatus.AVAILABLE)
            await bike.save(using_db=connection)

        logger.info("Rider %s cancelled rental %s of %s", user.id, instance.id, bike.code)
        self.hub.emit(RentalEvent.rental_cancelled, user, bike, instance)
        return instance

    async def active_rental(self, rider: Union[User, int]) -> Optional[Rental]:
        """Gets the active rental for a given rider."""
        return await get_active_rental(rider)

    async def has_active_rental(self, rider: Union[User, int]) -> bool:
        """Checks if the given rider has an active rental."""
        return await self.active_rental(rider) is not None

    async def get_price_estimate(self, rental: Union[Rental, int], *, now: datetime = None) -> Decimal:
        """
        Gets the price of the rental so far.

        :raises RentalNotFoundError: If the rental does not exist.
        :raises RentalNotActiveError: If the rental has ended.
        """
        instance = await get_rental(rental)
        if instance is None:
            raise RentalNotFoundError(f"No such rental {resolve_id(rental)}.")
        if not instance.is_active:
            raise RentalNotActiveError(f"Rental {instance.id} is {instance.status.value}.")

        if self.discount_at_return:
            user = await get_user(instance.user_id)
            price = estimate_price(instance.start_time, instance.base_rate, user.tier, now)
        else:
            price = estimate_price(instance.start_time, instance.base_rate, now=now,
                                   discount=instance.discount_percentage)

        return price.total_amount

    @staticmethod
    async def _lock_rental(rental: Union[Rental, int], connection):
        """
        Locks an active rental along with its rider and bicycle.

        The rental is read once to find its rider, so that the rider
        can be locked before it.
        """
        current = await get_rental(rental, using_db=connection)
        if current is None:
            raise RentalNotFoundError(f"No such rental {resolve_id(rental)}.")

        user = await get_user(current.user_id, using_db=connection, lock=True)
        instance = await get_rental(current, using_db=connection, lock=True)
        if not instance.is_active:
            logger.debug("Rental %s is already %s", instance.id, instance.status.value)
            raise RentalNotActiveError(f"Rental {instance.id} is {instance.status.value}.")

        bike = await get_bicycle(instance.bike_id, using_db=connection, lock=True)
        instance.user = user
        instance.bike = bike
        return instance, user, bike
