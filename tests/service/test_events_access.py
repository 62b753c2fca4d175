from datetime import datetime, timedelta, timezone

import pytest

from fleet.models.util import EventStatus
from fleet.service import EventInPastError, EventNotFoundError, EventHasParticipantsError, \
    CapacityBelowParticipantsError, SiteNotFoundError, RiderNotFoundError, InvalidTransitionError
from fleet.service.access.events import create_event, get_event, get_events, update_event_capacity, \
    set_event_status, delete_event


def in_days(days: float) -> datetime:
    return datetime.now(timezone.utc) + timedelta(days=days)


async def test_create_event(random_site, random_admin):
    event = await create_event("Sunday spin", in_days(3), random_site, random_admin, capacity=10)

    assert event.current_participants == 0
    assert event.status is EventStatus.PUBLISHED
    assert event.event_type == "group_ride"
    assert (await get_event(event.id)).name == "Sunday spin"


async def test_create_event_in_past(random_site, random_admin):
    with pytest.raises(EventInPastError):
        await create_event("Yesterday", in_days(-1), random_site, random_admin)


async def test_create_event_bad_capacity(random_site, random_admin):
    with pytest.raises(ValueError):
        await create_event("Nobody", in_days(1), random_site, random_admin, capacity=0)


async def test_create_event_missing_references(random_site, random_admin):
    with pytest.raises(SiteNotFoundError):
        await create_event("Nowhere", in_days(1), 9999, random_admin)
    with pytest.raises(RiderNotFoundError):
        await create_event("No one", in_days(1), random_site, 9999)


async def test_get_events(random_event_factory, random_site_factory, random_admin, event_manager, random_user):
    first_site, second_site = await random_site_factory(), await random_site_factory()
    past = await random_event_factory(first_site, random_admin, starts_in=-timedelta(days=1))
    full = await random_event_factory(first_site, random_admin, capacity=1, starts_in=timedelta(days=1))
    open_event = await random_event_factory(second_site, random_admin, starts_in=timedelta(days=2))
    await event_manager.register(random_user, full)

    assert [e.id for e in await get_events()] == [past.id, full.id, open_event.id]
    assert [e.id for e in await get_events(site=first_site)] == [past.id, full.id]
    assert [e.id for e in await get_events(upcoming=True)] == [full.id, open_event.id]
    assert [e.id for e in await get_events(upcoming=False)] == [past.id]
    assert [e.id for e in await get_events(upcoming=True, available=True)] == [open_event.id]
    assert [e.id for e in await get_events(available=False)] == [full.id]


async def test_update_capacity(event_manager, random_user_factory, random_event):
    """Assert that the capacity cannot drop below the registered participants."""
    for _ in range(2):
        await event_manager.register(await random_user_factory(), random_event)

    with pytest.raises(CapacityBelowParticipantsError):
        await update_event_capacity(random_event, 1)

    event = await update_event_capacity(random_event, 5)
    assert event.capacity == 5
    event = await update_event_capacity(random_event, None)
    assert event.capacity is None

    with pytest.raises(EventNotFoundError):
        await update_event_capacity(9999, 5)


async def test_set_event_status(random_event):
    event = await set_event_status(random_event, EventStatus.CANCELLED)
    assert event.status is EventStatus.CANCELLED

    with pytest.raises(InvalidTransitionError):
        await set_event_status(random_event, EventStatus.PUBLISHED)


async def test_delete_event(event_manager, random_user, random_event):
    """Assert that an event with participants cannot be deleted."""
    await event_manager.register(random_user, random_event)
    with pytest.raises(EventHasParticipantsError):
        await delete_event(random_event)

    await event_manager.unregister(random_user, random_event)
    await delete_event(random_event)
    assert await get_event(random_event) is None
