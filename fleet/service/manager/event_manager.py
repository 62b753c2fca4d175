"""
Event Manager
-------------

Handles registering riders for events. The occupancy counter on the
event is only ever changed here, in the same transaction that locks
the event row and checks its capacity, so it can never be overbooked.
"""

from datetime import datetime, timezone
from typing import Union, List

from tortoise.expressions import F
from tortoise.transactions import in_transaction

from fleet import logger
from fleet.events import EventHub, EventList
from fleet.models import Event, EventParticipant, User
from fleet.models.util import AttendanceStatus, resolve_id
from fleet.service.access.events import get_event, get_participant, get_participants, get_registrations
from fleet.service.access.users import get_user
from fleet.service.errors import RiderNotFoundError, EventNotFoundError, EventInPastError, EventFullError, \
    AlreadyRegisteredError, NotRegisteredError


class RegistrationEvent(EventList):

    def participant_registered(self, user: User, event: Event, participant: EventParticipant):
        """A rider registered for an event."""

    def participant_unregistered(self, user: User, event: Event, participant: EventParticipant):
        """A rider cancelled their registration."""

    def attendance_marked(self, event: Event, participant: EventParticipant):
        """A participant was marked as attended or absent."""


class EventManager:
    """
    Coordinates registrations for events, keeping the participant
    counter in line with the registrations.
    """

    def __init__(self):
        self.hub = EventHub(RegistrationEvent)

    async def register(self, rider: Union[User, int], event: Union[Event, int]) -> EventParticipant:
        """
        Registers a rider for an upcoming event.

        :raises RiderNotFoundError: If the rider does not exist.
        :raises EventNotFoundError: If the event does not exist.
        :raises EventInPastError: If the event has already happened.
        :raises EventFullError: If the event is at capacity.
        :raises AlreadyRegisteredError: If the rider is already registered.
        """
        async with in_transaction() as connection:
            user = await get_user(rider, using_db=connection)
            if user is None:
                raise RiderNotFoundError(f"No such rider {resolve_id(rider)}.")

            instance = await self._lock_upcoming_event(event, connection)
            if not instance.has_space():
                logger.debug("Rider %s tried to register for full event %s", user.id, instance.id)
                raise EventFullError(f"Event {instance.id} is full.", instance.capacity)

            if await get_participant(instance, user, using_db=connection) is not None:
                raise AlreadyRegisteredError(f"Rider {user.id} is already registered for event {instance.id}.")

            participant = await EventParticipant.create(event=instance, user=user, using_db=connection)
            await Event.filter(id=instance.id).using_db(connection).update(
                current_participants=F("current_participants") + 1
            )
            await instance.refresh_from_db(fields=["current_participants"], using_db=connection)

            if instance.capacity is not None and instance.current_participants > instance.capacity:
                raise EventFullError(f"Event {instance.id} is full.", instance.capacity)

        logger.info("Rider %s registered for event %s (%s)", user.id, instance.id, instance)
        self.hub.emit(RegistrationEvent.participant_registered, user, instance, participant)
        return participant

    async def unregister(self, rider: Union[User, int], event: Union[Event, int]) -> EventParticipant:
        """
        Cancels a rider's registration, freeing up their place.
        The cancelled registration is kept.

        :raises EventNotFoundError: If the event does not exist.
        :raises EventInPastError: If the event has already happened.
        :raises NotRegisteredError: If the rider is not registered.
        """
        async with in_transaction() as connection:
            instance = await self._lock_upcoming_event(event, connection)

            participant = await get_participant(instance, rider, using_db=connection, lock=True)
            if participant is None:
                raise NotRegisteredError(f"Rider {resolve_id(rider)} is not registered for event {instance.id}.")

            participant.transition(AttendanceStatus.CANCELLED)
            await participant.save(using_db=connection)

            await Event.filter(id=instance.id, current_participants__gt=0).using_db(connection).update(
                current_participants=F("current_participants") - 1
            )
            await instance.refresh_from_db(fields=["current_participants"], using_db=connection)
            user = await get_user(participant.user_id, using_db=connection)

        logger.info("Rider %s unregistered from event %s (%s)", user.id, instance.id, instance)
        self.hub.emit(RegistrationEvent.participant_unregistered, user, instance, participant)
        return participant

    async def mark_attendance(self, event: Union[Event, int], rider: Union[User, int]) -> EventParticipant:
        """
        Marks that a participant turned up. Marking them twice changes nothing.

        :raises EventNotFoundError: If the event does not exist.
        :raises NotRegisteredError: If the rider is not registered.
        """
        return await self._mark(event, rider, AttendanceStatus.ATTENDED)

    async def mark_absence(self, event: Union[Event, int], rider: Union[User, int]) -> EventParticipant:
        """
        Marks that a participant did not turn up.

        :raises EventNotFoundError: If the event does not exist.
        :raises NotRegisteredError: If the rider is not registered.
        """
        return await self._mark(event, rider, AttendanceStatus.ABSENT)

    async def participants(self, event: Union[Event, int]) -> List[EventParticipant]:
        """Gets the current participants of an event."""
        if await get_event(event) is None:
            raise EventNotFoundError(f"No such event {resolve_id(event)}.")
        return await get_participants(event)

    async def rider_events(self, rider: Union[User, int], *,
                           status: AttendanceStatus = None) -> List[EventParticipant]:
        """Gets the registrations of a rider, with their events."""
        if await get_user(rider) is None:
            raise RiderNotFoundError(f"No such rider {resolve_id(rider)}.")
        return await get_registrations(rider, status=status)

    async def _mark(self, event, rider, target: AttendanceStatus) -> EventParticipant:
        async with in_transaction() as connection:
            instance = await get_event(event, using_db=connection, lock=True)
            if instance is None:
                raise EventNotFoundError(f"No such event {resolve_id(event)}.")

            participant = await get_participant(instance, rider, using_db=connection, lock=True)
            if participant is None:
                raise NotRegisteredError(f"Rider {resolve_id(rider)} is not registered for event {instance.id}.")

            if participant.attendance_status is target:
                return participant

            participant.transition(target)
            await participant.save(using_db=connection)

        logger.info("Rider %s marked %s for event %s", participant.user_id, target.value, instance.id)
        self.hub.emit(RegistrationEvent.attendance_marked, instance, participant)
        return participant

    @staticmethod
    async def _lock_upcoming_event(event: Union[Event, int], connection) -> Event:
        instance = await get_event(event, using_db=connection, lock=True)
        if instance is None:
            raise EventNotFoundError(f"No such event {resolve_id(event)}.")

        if not instance.is_upcoming(datetime.now(timezone.utc)):
            raise EventInPastError(f"Event {instance.id} has already happened.")

        return instance
