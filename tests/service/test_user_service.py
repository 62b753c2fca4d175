import pytest

from fleet.models.util import UserRole
from fleet.service import RiderExistsError, RiderNotFoundError
from fleet.service.access.sites import create_site, get_site, get_sites
from fleet.service.access.users import create_user, get_user, get_users, set_user_tier
from tests.conftest import fake


async def test_create_user(database):
    user = await create_user(fake.sha1(), "Ada", "Lovelace", fake.email(), tier=2)
    assert user.role is UserRole.USER
    assert (await get_user(external_id=user.external_id)).id == user.id
    assert [u.id for u in await get_users(name="ad")] == [user.id]


async def test_create_user_exists(random_user):
    with pytest.raises(RiderExistsError):
        await create_user(random_user.external_id, "Ada", "Lovelace", fake.email())


async def test_create_user_bad_tier(database):
    with pytest.raises(ValueError):
        await create_user(fake.sha1(), "Ada", "Lovelace", fake.email(), tier=7)


async def test_set_tier(random_user):
    user = await set_user_tier(random_user, 4)
    assert user.tier == 4
    assert (await get_user(random_user.id)).tier == 4

    with pytest.raises(ValueError):
        await set_user_tier(random_user, 0)
    with pytest.raises(RiderNotFoundError):
        await set_user_tier(9999, 1)


async def test_sites(database):
    north = await create_site("North Depot", "Edinburgh", "Lothian")
    south = await create_site("South Depot", "Glasgow", "Strathclyde", address="1 Main St")

    assert (await get_site(south.id)).address == "1 Main St"
    assert [s.id for s in await get_sites()] == [north.id, south.id]
    assert [s.id for s in await get_sites(city="edinburgh")] == [north.id]
    assert [s.id for s in await get_sites(region="Strathclyde")] == [south.id]
