"""
Users
-----
"""
from typing import Union, Optional, List

from tortoise.backends.base.client import BaseDBAsyncClient
from tortoise.exceptions import IntegrityError

from fleet import logger
from fleet.models import User
from fleet.models.util import UserRole, resolve_id
from fleet.pricing import TIER_DISCOUNTS
from fleet.service.access import scoped
from fleet.service.errors import RiderNotFoundError, RiderExistsError


def _check_tier(tier: Optional[int]):
    if tier is not None and tier not in TIER_DISCOUNTS:
        raise ValueError(f"Tier must be between 1 and 6, not {tier}.")


async def get_users(*, name: str = None) -> List[User]:
    """
    Gets all the users in the system.

    :param name: An optional name to filter by.
    """
    query = User.all()

    if name is not None:
        query = query.filter(first_name__icontains=name)

    return await query


async def get_user(user: Union[User, int] = None, *, external_id: str = None,
                   using_db: BaseDBAsyncClient = None, lock=False) -> Optional[User]:
    """Gets a user by their id or their external id."""
    if user is not None:
        query = User.filter(id=resolve_id(user))
    elif external_id is not None:
        query = User.filter(external_id=external_id)
    else:
        raise TypeError("Either a user or an external id is required.")

    return await scoped(query, using_db, lock).first()


async def create_user(external_id: str, first_name: str, last_name: str, email: str, *,
                      tier: int = None, role: UserRole = UserRole.USER) -> User:
    """
    Creates a user.

    :raises RiderExistsError: If the external id or email is taken.
    :raises ValueError: If the tier is out of range.
    """
    _check_tier(tier)

    try:
        user = await User.create(external_id=external_id, first_name=first_name, last_name=last_name,
                                 email=email, tier=tier, role=role)
    except IntegrityError:
        raise RiderExistsError(f"A user with the external id {external_id} or email {email} exists.")

    logger.info("Created user %s", user)
    return user


async def set_user_tier(user: Union[User, int], tier: Optional[int]) -> User:
    """
    Updates the rider's declared tier. Active rentals pick the new
    tier up when they are returned.

    :raises RiderNotFoundError: If the user does not exist.
    :raises ValueError: If the tier is out of range.
    """
    _check_tier(tier)

    instance = await get_user(user)
    if instance is None:
        raise RiderNotFoundError(f"No such user {resolve_id(user)}.")

    instance.tier = tier
    await instance.save(update_fields=["tier"])
    return instance
