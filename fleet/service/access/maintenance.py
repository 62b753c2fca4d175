"""
Maintenance
-----------
"""
from datetime import datetime, timezone
from typing import Optional, Union, List

from tortoise.backends.base.client import BaseDBAsyncClient

from fleet.models import Bicycle, MaintenanceRecord
from fleet.models.util import MaintenanceType, resolve_id
from fleet.service.access import scoped


async def get_maintenance_record(record: Union[MaintenanceRecord, int], *, using_db: BaseDBAsyncClient = None,
                                 lock=False) -> Optional[MaintenanceRecord]:
    return await scoped(MaintenanceRecord.filter(id=resolve_id(record)), using_db, lock).first()


async def get_maintenance_records(*, bicycle: Union[Bicycle, int] = None,
                                  maintenance_type: MaintenanceType = None) -> List[MaintenanceRecord]:
    """Gets maintenance records, most recent first."""
    query = MaintenanceRecord.all()

    if bicycle is not None:
        query = query.filter(bike_id=resolve_id(bicycle))
    if maintenance_type is not None:
        query = query.filter(maintenance_type=maintenance_type)

    return await query.order_by("-performed_at", "-id")


async def count_open_records(bicycle: Union[Bicycle, int], *, using_db: BaseDBAsyncClient = None) -> int:
    """The number of records on the bicycle that are not yet completed."""
    query = MaintenanceRecord.filter(bike_id=resolve_id(bicycle), completed_at__isnull=True)
    return await scoped(query, using_db).count()


async def get_upcoming_maintenance(now: datetime = None) -> List[MaintenanceRecord]:
    """Gets the records whose next maintenance is due from now on, soonest first."""
    now = now or datetime.now(timezone.utc)
    return await MaintenanceRecord.filter(next_due_at__gte=now).order_by("next_due_at").prefetch_related("bike")


async def get_overdue_maintenance(now: datetime = None) -> List[MaintenanceRecord]:
    """Gets the records whose next maintenance was due before now, oldest first."""
    now = now or datetime.now(timezone.utc)
    return await MaintenanceRecord.filter(next_due_at__lt=now).order_by("next_due_at").prefetch_related("bike")


async def get_last_maintenance(bicycle: Union[Bicycle, int]) -> Optional[MaintenanceRecord]:
    return await MaintenanceRecord.filter(bike_id=resolve_id(bicycle)).order_by("-performed_at", "-id").first()
