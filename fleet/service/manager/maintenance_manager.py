"""
Maintenance Manager
-------------------

Takes bicycles in and out of maintenance. A bicycle stays in maintenance
while any of its records is open, and comes back into circulation when
the last one is completed.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Union, Optional, List

from tortoise.transactions import in_transaction

from fleet import logger
from fleet.events import EventHub, EventList
from fleet.models import Bicycle, MaintenanceRecord
from fleet.models.util import BicycleStatus, MaintenanceType, resolve_id
from fleet.service.access.bicycles import get_bicycle
from fleet.service.access.maintenance import get_maintenance_record, count_open_records, get_maintenance_records, \
    get_upcoming_maintenance, get_overdue_maintenance, get_last_maintenance
from fleet.service.errors import BicycleNotFoundError, BicycleNotAvailableError, MaintenanceRecordNotFoundError


class MaintenanceEvent(EventList):

    def maintenance_scheduled(self, bike: Bicycle, record: MaintenanceRecord):
        """A bicycle was taken in for maintenance."""

    def maintenance_completed(self, bike: Bicycle, record: MaintenanceRecord):
        """A piece of maintenance was finished."""


class MaintenanceManager:

    def __init__(self):
        self.hub = EventHub(MaintenanceEvent)

    async def schedule(self, bicycle: Union[Bicycle, int], maintenance_type: MaintenanceType, cost: Decimal, *,
                       performed_by: str = None, description: str = None,
                       next_due_at: datetime = None) -> MaintenanceRecord:
        """
        Opens a maintenance record and takes the bicycle out of circulation.
        A bicycle already in maintenance gets the extra record and stays there.

        :raises BicycleNotFoundError: If the bicycle does not exist.
        :raises BicycleNotAvailableError: If the bicycle is rented or retired.
        :raises ValueError: If the cost is negative.
        """
        if Decimal(str(cost)) < 0:
            raise ValueError("Maintenance cost cannot be negative.")

        async with in_transaction() as connection:
            bike = await get_bicycle(bicycle, using_db=connection, lock=True)
            if bike is None:
                raise BicycleNotFoundError(f"No such bicycle {resolve_id(bicycle)}.")
            if bike.status not in (BicycleStatus.AVAILABLE, BicycleStatus.MAINTENANCE):
                logger.debug("Tried to schedule maintenance on %s", bike)
                raise BicycleNotAvailableError(f"Bicycle {bike.code} is {bike.status.value}.", bike.status)

            record = await MaintenanceRecord.create(
                bike=bike, maintenance_type=maintenance_type, cost=cost, performed_by=performed_by,
                description=description, next_due_at=next_due_at, using_db=connection,
            )

            if bike.status is BicycleStatus.AVAILABLE:
                bike.transition(BicycleStatus.MAINTENANCE)
                await bike.save(using_db=connection)

        logger.info("Scheduled %s maintenance %s on %s", maintenance_type.value, record.id, bike.code)
        self.hub.emit(MaintenanceEvent.maintenance_scheduled, bike, record)
        return record

    async def complete(self, record: Union[MaintenanceRecord, int]) -> MaintenanceRecord:
        """
        Completes a maintenance record. Completing a record twice changes nothing.

        :raises MaintenanceRecordNotFoundError: If the record does not exist.
        """
        async with in_transaction() as connection:
            current = await get_maintenance_record(record, using_db=connection)
            if current is None:
                raise MaintenanceRecordNotFoundError(f"No such maintenance record {resolve_id(record)}.")

            bike = await get_bicycle(current.bike_id, using_db=connection, lock=True)
            instance = await get_maintenance_record(current, using_db=connection, lock=True)
            if not instance.is_open:
                return instance

            now = datetime.now(timezone.utc)
            instance.completed_at = now
            await instance.save(using_db=connection)

            bike.last_maintenance_at = now
            if bike.status is BicycleStatus.MAINTENANCE and not await count_open_records(bike, using_db=connection):
                bike.transition(BicycleStatus.AVAILABLE)
            await bike.save(using_db=connection)

        logger.info("Completed maintenance %s on %s, which is %s", instance.id, bike.code, bike.status.value)
        self.hub.emit(MaintenanceEvent.maintenance_completed, bike, instance)
        return instance

    async def records(self, *, bicycle: Union[Bicycle, int] = None,
                      maintenance_type: MaintenanceType = None) -> List[MaintenanceRecord]:
        return await get_maintenance_records(bicycle=bicycle, maintenance_type=maintenance_type)

    async def upcoming(self, now: datetime = None) -> List[MaintenanceRecord]:
        return await get_upcoming_maintenance(now)

    async def overdue(self, now: datetime = None) -> List[MaintenanceRecord]:
        return await get_overdue_maintenance(now)

    async def last(self, bicycle: Union[Bicycle, int]) -> Optional[MaintenanceRecord]:
        return await get_last_maintenance(bicycle)
