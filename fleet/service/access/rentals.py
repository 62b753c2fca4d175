"""
Rentals
-------
"""
from typing import Union, Optional, List

from tortoise.backends.base.client import BaseDBAsyncClient

from fleet.models import Bicycle, Rental, User, Payment
from fleet.models.util import RentalStatus, resolve_id
from fleet.service.access import scoped


async def get_rental(rental: Union[Rental, int], *, using_db: BaseDBAsyncClient = None, lock=False) -> Optional[Rental]:
    return await scoped(Rental.filter(id=resolve_id(rental)), using_db, lock).first()


async def get_rentals(*, rider: Union[User, int] = None, bicycle: Union[Bicycle, int] = None,
                      status: RentalStatus = None) -> List[Rental]:
    """
    Gets rentals, newest first.

    :param rider: Only the rentals of this rider.
    :param bicycle: Only the rentals of this bicycle.
    :param status: Only the rentals with this status.
    """
    query = Rental.all()

    if rider is not None:
        query = query.filter(user_id=resolve_id(rider))
    if bicycle is not None:
        query = query.filter(bike_id=resolve_id(bicycle))
    if status is not None:
        query = query.filter(status=status)

    return await query.order_by("-start_time", "-id")


async def get_active_rental(rider: Union[User, int], *, using_db: BaseDBAsyncClient = None,
                            lock=False) -> Optional[Rental]:
    """Gets the rider's active rental, if they have one."""
    query = Rental.filter(user_id=resolve_id(rider), status=RentalStatus.ACTIVE)
    return await scoped(query, using_db, lock).first()


async def get_active_rental_for_bicycle(bicycle: Union[Bicycle, int], *,
                                        using_db: BaseDBAsyncClient = None) -> Optional[Rental]:
    """Gets the rental the bicycle is currently out on, if any."""
    query = Rental.filter(bike_id=resolve_id(bicycle), status=RentalStatus.ACTIVE)
    return await scoped(query, using_db).first()


async def get_payment_for_rental(rental: Union[Rental, int]) -> Optional[Payment]:
    """Gets the payment written when the rental was returned."""
    return await Payment.filter(rental_id=resolve_id(rental)).order_by("-id").first()
