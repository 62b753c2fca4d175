"""
Bicycles
--------

Handles the CRUD for a bicycle. Status changes that involve a rental
or maintenance go through the managers; the functions here only
cover the administrative ones.
"""
from datetime import date
from decimal import Decimal
from typing import Optional, Union, List

from shapely.geometry import Point
from tortoise.backends.base.client import BaseDBAsyncClient
from tortoise.exceptions import IntegrityError
from tortoise.transactions import in_transaction

from fleet import logger
from fleet.models import Bicycle, Site
from fleet.models.util import BicycleStatus, resolve_id
from fleet.service.access import scoped
from fleet.service.access.rentals import get_active_rental_for_bicycle
from fleet.service.access.sites import get_site
from fleet.service.errors import BicycleNotFoundError, BicycleCodeExistsError, BicycleInUseError, SiteNotFoundError


async def get_bicycle(bicycle: Union[Bicycle, int] = None, *, code: str = None,
                      using_db: BaseDBAsyncClient = None, lock=False) -> Optional[Bicycle]:
    """
    Gets a bicycle by its id or its code.

    :param lock: Whether to lock the row until the transaction ends.
    """
    if bicycle is not None:
        query = Bicycle.filter(id=resolve_id(bicycle))
    elif code is not None:
        query = Bicycle.filter(code=code.upper())
    else:
        raise TypeError("Either a bicycle or a code is required.")

    return await scoped(query, using_db, lock).first()


async def get_bicycles(*, site: Union[Site, int] = None, status: BicycleStatus = None) -> List[Bicycle]:
    """Gets all the bicycles, optionally only those at a site or with a status."""
    query = Bicycle.all()

    if site is not None:
        query = query.filter(site_id=resolve_id(site))
    if status is not None:
        query = query.filter(status=status)

    return await query.order_by("code")


async def create_bicycle(code: str, brand: str, color: str, hourly_rate: Decimal, site: Union[Site, int], *,
                         model_name: str = None, location: Point = None, purchased_on: date = None) -> Bicycle:
    """
    Registers a new bicycle with a site.

    :param code: The human readable code, stored upper case.
    :raises SiteNotFoundError: If the site does not exist.
    :raises BicycleCodeExistsError: If the code is taken.
    :raises ValueError: If the hourly rate is negative.
    """
    code = code.strip().upper()
    if Decimal(str(hourly_rate)) < 0:
        raise ValueError("The hourly rate cannot be negative.")

    async with in_transaction() as connection:
        if await get_site(site, using_db=connection) is None:
            raise SiteNotFoundError(f"No such site {resolve_id(site)}.")

        if await Bicycle.filter(code=code).using_db(connection).exists():
            raise BicycleCodeExistsError(f"A bicycle with code {code} exists.")

        bicycle = Bicycle(
            code=code, brand=brand, model_name=model_name, color=color,
            hourly_rate=hourly_rate, site_id=resolve_id(site), purchased_on=purchased_on,
        )
        bicycle.location = location

        try:
            await bicycle.save(using_db=connection)
        except IntegrityError:
            raise BicycleCodeExistsError(f"A bicycle with code {code} exists.")

    logger.info("Registered bicycle %s", bicycle)
    return bicycle


async def update_bicycle_location(bicycle: Union[Bicycle, int], location: Point) -> Bicycle:
    """
    Records the last known location of a bicycle.

    :raises BicycleNotFoundError: If the bicycle does not exist.
    """
    instance = await get_bicycle(bicycle)
    if instance is None:
        raise BicycleNotFoundError(f"No such bicycle {resolve_id(bicycle)}.")

    instance.location = location
    await instance.save()
    return instance


async def retire_bicycle(bicycle: Union[Bicycle, int]) -> Bicycle:
    """
    Takes a bicycle out of circulation for good.

    :raises BicycleNotFoundError: If the bicycle does not exist.
    :raises InvalidTransitionError: If the bicycle is rented or already retired.
    """
    async with in_transaction() as connection:
        instance = await get_bicycle(bicycle, using_db=connection, lock=True)
        if instance is None:
            raise BicycleNotFoundError(f"No such bicycle {resolve_id(bicycle)}.")

        instance.transition(BicycleStatus.RETIRED)
        await instance.save(using_db=connection)

    logger.info("Retired bicycle %s", instance)
    return instance


async def delete_bicycle(bicycle: Union[Bicycle, int]) -> None:
    """
    Deletes a bicycle, along with its history.

    :raises BicycleNotFoundError: If the bicycle does not exist.
    :raises BicycleInUseError: If the bicycle is rented, or an active rental still refers to it.
    """
    async with in_transaction() as connection:
        instance = await get_bicycle(bicycle, using_db=connection, lock=True)
        if instance is None:
            raise BicycleNotFoundError(f"No such bicycle {resolve_id(bicycle)}.")
        if instance.status is BicycleStatus.RENTED or \
                await get_active_rental_for_bicycle(instance, using_db=connection) is not None:
            raise BicycleInUseError(f"Bicycle {instance.code} is rented and cannot be deleted.")

        await instance.delete(using_db=connection)

    logger.info("Deleted bicycle %s", instance)
