"""
Event
---------------------------

Group rides hosted by a site. An event keeps a denormalized count of
its registered participants which is only ever changed in the same
transaction that checks it against the capacity.
"""
from datetime import datetime
from typing import Dict, Any, Optional

from tortoise import Model, fields
from tortoise.validators import MinValueValidator

from fleet.models.util import EventStatus, AttendanceStatus


class Event(Model):
    id = fields.IntField(primary_key=True)
    name = fields.CharField(max_length=200)
    description = fields.TextField(null=True)
    event_type = fields.CharField(max_length=50, default="group_ride")
    event_date: datetime = fields.DatetimeField()
    meeting_point = fields.CharField(max_length=255, null=True)

    capacity: Optional[int] = fields.IntField(null=True, validators=[MinValueValidator(1)])
    """The maximum number of registered participants, or None if unbounded."""

    current_participants = fields.IntField(default=0, validators=[MinValueValidator(0)])
    site = fields.ForeignKeyField("models.Site", related_name="events")
    created_by = fields.ForeignKeyField("models.User", related_name="created_events")
    status = fields.CharEnumField(EventStatus, max_length=16, default=EventStatus.PUBLISHED)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    def has_space(self) -> bool:
        """Whether another participant fits in the event."""
        return self.capacity is None or self.current_participants < self.capacity

    def is_upcoming(self, now: datetime) -> bool:
        return self.event_date > now

    def transition(self, target: EventStatus):
        self.status.assert_transition(target)
        self.status = target

    def serialize(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "event_type": self.event_type,
            "event_date": self.event_date,
            "meeting_point": self.meeting_point,
            "capacity": self.capacity,
            "current_participants": self.current_participants,
            "site_id": self.site_id,
            "status": self.status,
        }

    def __str__(self):
        return f"[{self.status.value}] {self.name} ({self.current_participants}/{self.capacity or '-'})"


class EventParticipant(Model):
    """
    A rider's registration for an event.

    Unregistering cancels the record rather than removing it, so at most
    one non-cancelled record exists per event and rider.
    """

    id = fields.IntField(primary_key=True)
    event = fields.ForeignKeyField("models.Event", related_name="participants")
    user = fields.ForeignKeyField("models.User", related_name="registrations")
    registered_at = fields.DatetimeField(auto_now_add=True)
    attendance_status = fields.CharEnumField(AttendanceStatus, max_length=16, default=AttendanceStatus.REGISTERED)

    def transition(self, target: AttendanceStatus):
        self.attendance_status.assert_transition(target)
        self.attendance_status = target

    def serialize(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "event_id": self.event_id,
            "user_id": self.user_id,
            "registered_at": self.registered_at,
            "attendance_status": self.attendance_status,
        }
