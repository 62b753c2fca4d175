"""
Events
------

Handles the CRUD for events and reading their participants. The
participant counter is never written here; registrations go through
the :class:`~fleet.service.manager.event_manager.EventManager`.
"""
from datetime import datetime, timezone
from typing import Optional, Union, List

from tortoise.backends.base.client import BaseDBAsyncClient
from tortoise.transactions import in_transaction

from fleet import logger
from fleet.models import Event, EventParticipant, Site, User
from fleet.models.util import AttendanceStatus, EventStatus, resolve_id
from fleet.service.access import scoped
from fleet.service.access.sites import get_site
from fleet.service.access.users import get_user
from fleet.service.errors import EventNotFoundError, EventInPastError, EventHasParticipantsError, \
    CapacityBelowParticipantsError, SiteNotFoundError, RiderNotFoundError


def _check_capacity(capacity: Optional[int]):
    if capacity is not None and capacity < 1:
        raise ValueError("Capacity must be at least 1.")


async def get_event(event: Union[Event, int], *, using_db: BaseDBAsyncClient = None, lock=False) -> Optional[Event]:
    return await scoped(Event.filter(id=resolve_id(event)), using_db, lock).first()


async def get_events(*, site: Union[Site, int] = None, status: EventStatus = None, upcoming: bool = None,
                     available: bool = None, now: datetime = None) -> List[Event]:
    """
    Gets events ordered by date.

    :param site: Only the events hosted by this site.
    :param status: Only the events with this status.
    :param upcoming: Only events after (or, when False, not after) ``now``.
    :param available: Only events with (or, when False, without) space for another participant.
    """
    query = Event.all()

    if site is not None:
        query = query.filter(site_id=resolve_id(site))
    if status is not None:
        query = query.filter(status=status)
    if upcoming is not None:
        now = now or datetime.now(timezone.utc)
        query = query.filter(event_date__gt=now) if upcoming else query.filter(event_date__lte=now)

    events = await query.order_by("event_date", "id")

    if available is not None:
        events = [event for event in events if event.has_space() == available]

    return events


async def create_event(name: str, event_date: datetime, site: Union[Site, int], created_by: Union[User, int], *,
                       capacity: int = None, description: str = None, event_type: str = "group_ride",
                       meeting_point: str = None, status: EventStatus = EventStatus.PUBLISHED,
                       now: datetime = None) -> Event:
    """
    Creates an event.

    :raises EventInPastError: If the event date is not in the future.
    :raises SiteNotFoundError: If the site does not exist.
    :raises RiderNotFoundError: If the creator does not exist.
    :raises ValueError: If the capacity is less than one.
    """
    _check_capacity(capacity)
    now = now or datetime.now(timezone.utc)
    if event_date <= now:
        raise EventInPastError("Events must be scheduled in the future.")

    async with in_transaction() as connection:
        if await get_site(site, using_db=connection) is None:
            raise SiteNotFoundError(f"No such site {resolve_id(site)}.")
        if await get_user(created_by, using_db=connection) is None:
            raise RiderNotFoundError(f"No such user {resolve_id(created_by)}.")

        event = await Event.create(
            name=name, description=description, event_type=event_type, event_date=event_date,
            meeting_point=meeting_point, capacity=capacity, site_id=resolve_id(site),
            created_by_id=resolve_id(created_by), status=status, using_db=connection,
        )

    logger.info("Created event %s", event)
    return event


async def update_event_capacity(event: Union[Event, int], capacity: Optional[int]) -> Event:
    """
    Changes the capacity of an event, or removes it when None.

    :raises EventNotFoundError: If the event does not exist.
    :raises CapacityBelowParticipantsError: If more participants are registered than the new capacity.
    """
    _check_capacity(capacity)

    async with in_transaction() as connection:
        instance = await get_event(event, using_db=connection, lock=True)
        if instance is None:
            raise EventNotFoundError(f"No such event {resolve_id(event)}.")
        if capacity is not None and capacity < instance.current_participants:
            raise CapacityBelowParticipantsError(
                f"Event {instance.id} has {instance.current_participants} participants, more than {capacity}."
            )

        instance.capacity = capacity
        await instance.save(using_db=connection)

    return instance


async def set_event_status(event: Union[Event, int], status: EventStatus) -> Event:
    """
    Moves an event along its status table.

    :raises EventNotFoundError: If the event does not exist.
    :raises InvalidTransitionError: If the event cannot move to that status.
    """
    async with in_transaction() as connection:
        instance = await get_event(event, using_db=connection, lock=True)
        if instance is None:
            raise EventNotFoundError(f"No such event {resolve_id(event)}.")

        instance.transition(status)
        await instance.save(using_db=connection)

    logger.info("Event %s is now %s", instance.id, status.value)
    return instance


async def delete_event(event: Union[Event, int]) -> None:
    """
    Deletes an event.

    :raises EventNotFoundError: If the event does not exist.
    :raises EventHasParticipantsError: If anyone is registered.
    """
    async with in_transaction() as connection:
        instance = await get_event(event, using_db=connection, lock=True)
        if instance is None:
            raise EventNotFoundError(f"No such event {resolve_id(event)}.")
        if instance.current_participants > 0:
            raise EventHasParticipantsError(f"Event {instance.id} has registered participants.")

        await instance.delete(using_db=connection)

    logger.info("Deleted event %s", instance)


async def get_participant(event: Union[Event, int], rider: Union[User, int], *,
                          using_db: BaseDBAsyncClient = None, lock=False) -> Optional[EventParticipant]:
    """Gets the rider's current (non-cancelled) registration for an event."""
    query = EventParticipant.filter(
        event_id=resolve_id(event),
        user_id=resolve_id(rider),
        attendance_status__not=AttendanceStatus.CANCELLED,
    )
    return await scoped(query, using_db, lock).first()


async def get_participants(event: Union[Event, int], *, include_cancelled=False) -> List[EventParticipant]:
    query = EventParticipant.filter(event_id=resolve_id(event))

    if not include_cancelled:
        query = query.filter(attendance_status__not=AttendanceStatus.CANCELLED)

    return await query.order_by("registered_at", "id").prefetch_related("user")


async def get_registrations(rider: Union[User, int], *,
                            status: AttendanceStatus = None) -> List[EventParticipant]:
    """Gets the registrations of a rider, with their events."""
    query = EventParticipant.filter(user_id=resolve_id(rider))

    if status is not None:
        query = query.filter(attendance_status=status)

    return await query.order_by("registered_at", "id").prefetch_related("event")
