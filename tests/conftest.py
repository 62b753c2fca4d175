import os
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from itertools import count

import pytest
from faker import Faker
from faker.providers import address, company, internet, lorem, person
from shapely.geometry import Point
from tortoise import Tortoise, connections
from tortoise.exceptions import OperationalError

from fleet.config import model_modules
from fleet.models import Bicycle, Event, Rental, Site, User
from fleet.models.util import UserRole
from fleet.service import RentalManager, EventManager, MaintenanceManager, TransitionLogger

pytest_plugins = 'aiohttp.pytest_plugin'

fake = Faker()
fake.add_provider(address)
fake.add_provider(company)
fake.add_provider(internet)
fake.add_provider(lorem)
fake.add_provider(person)


@pytest.fixture(scope="session")
def database_url():
    return os.getenv("DATABASE_URL", "sqlite://:memory:")


async def init_db(database_url):
    """Creates a fresh database, dropping the previous one if it was left behind."""
    try:
        await Tortoise.init(db_url=database_url, modules=model_modules, use_tz=True, _create_db=True)
    except OperationalError:
        await Tortoise.init(db_url=database_url, modules=model_modules, use_tz=True)
        await Tortoise._drop_databases()
        await Tortoise.init(db_url=database_url, modules=model_modules, use_tz=True, _create_db=True)

    await Tortoise.generate_schemas(safe=True)


@pytest.fixture
async def database(loop, database_url):
    if database_url.endswith(":memory:"):
        await Tortoise.init(db_url=database_url, modules=model_modules, use_tz=True)
        await Tortoise.generate_schemas(safe=True)
        yield
        await connections.close_all()
    else:
        await init_db(database_url)
        yield
        await Tortoise._drop_databases()


@pytest.fixture
def rental_manager(database):
    return RentalManager(discount_at_return=True)


@pytest.fixture
def event_manager(database):
    return EventManager()


@pytest.fixture
def maintenance_manager(database):
    return MaintenanceManager()


@pytest.fixture
def transition_logger(rental_manager, event_manager, maintenance_manager):
    return TransitionLogger(rental_manager, event_manager, maintenance_manager)


@pytest.fixture
def random_site_factory(database):
    async def create_site():
        return await Site.create(name=fake.company(), city=fake.city(), region=fake.state(),
                                 address=fake.street_address())

    return create_site


@pytest.fixture
def random_user_factory(database):
    user_id = count(1)

    async def create_user(tier=None, is_admin=False):
        uid = next(user_id)
        return await User.create(
            external_id=f"{fake.sha1()}{uid}", first_name=fake.first_name(), last_name=fake.last_name(),
            email=f"{uid}.{fake.email()}", tier=tier, role=UserRole.ADMIN if is_admin else UserRole.USER,
        )

    return create_user


@pytest.fixture
def random_bike_factory(database):
    bike_id = count(1)

    async def create_bike(site: Site, hourly_rate="5000.00", **kwargs):
        bike = Bicycle(
            code=f"BK-{next(bike_id):04d}", brand=fake.company(), color=fake.color_name(),
            hourly_rate=Decimal(hourly_rate), site=site, **kwargs
        )
        bike.location = Point(float(fake.longitude()), float(fake.latitude()))
        await bike.save()
        return bike

    return create_bike


@pytest.fixture
def random_event_factory(database):
    async def create_event(site: Site, creator: User, capacity=None, starts_in=timedelta(days=7), **kwargs):
        return await Event.create(
            name=fake.sentence(nb_words=3), description=fake.paragraph(), site=site, created_by=creator,
            event_date=datetime.now(timezone.utc) + starts_in, capacity=capacity,
            meeting_point=fake.street_address(), **kwargs
        )

    return create_event


@pytest.fixture
async def random_site(random_site_factory) -> Site:
    """Creates a random site in the database."""
    return await random_site_factory()


@pytest.fixture
async def random_user(random_user_factory) -> User:
    """Creates a random user in the database."""
    return await random_user_factory()


@pytest.fixture
async def random_admin(random_user_factory) -> User:
    return await random_user_factory(is_admin=True)


@pytest.fixture
async def random_bike(random_bike_factory, random_site) -> Bicycle:
    """Creates a random bike in the database."""
    return await random_bike_factory(random_site)


@pytest.fixture
async def random_event(random_event_factory, random_site, random_admin) -> Event:
    """Creates a random upcoming event with room for two."""
    return await random_event_factory(random_site, random_admin, capacity=2)


@pytest.fixture
async def random_rental(rental_manager, random_bike, random_user) -> Rental:
    """Creates a random rental in the database."""
    return await rental_manager.start(random_user, random_bike)
