"""
Bicycle
-------------------------

Represents a physical bicycle in the fleet. The ``status`` field
is the single source of truth for whether the bicycle may be rented,
and only moves along the edges of :class:`~fleet.models.util.BicycleStatus`.
"""
from typing import Dict, Any, Optional

from shapely.geometry import Point
from tortoise import Model, fields

from fleet.models.util import BicycleStatus, to_point, serialize_point


class Bicycle(Model):
    id = fields.IntField(primary_key=True)
    code = fields.CharField(max_length=50, unique=True)
    brand = fields.CharField(max_length=100)
    model_name = fields.CharField(max_length=100, null=True)
    color = fields.CharField(max_length=50)
    status = fields.CharEnumField(BicycleStatus, max_length=16, default=BicycleStatus.AVAILABLE)

    hourly_rate = fields.DecimalField(max_digits=12, decimal_places=2)
    """The base price for an hour of riding."""

    site = fields.ForeignKeyField("models.Site", related_name="bicycles")
    longitude = fields.FloatField(null=True)
    latitude = fields.FloatField(null=True)

    purchased_on = fields.DateField(null=True)
    last_maintenance_at = fields.DatetimeField(null=True)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    @property
    def location(self) -> Optional[Point]:
        """The last known location of the bicycle."""
        return to_point(self.longitude, self.latitude)

    @location.setter
    def location(self, point: Optional[Point]):
        if point is None:
            self.longitude, self.latitude = None, None
        else:
            self.longitude, self.latitude = point.x, point.y

    @property
    def is_available(self) -> bool:
        return self.status is BicycleStatus.AVAILABLE

    def transition(self, target: BicycleStatus):
        """
        Moves the bicycle to the target status.

        :raises InvalidTransitionError: If the move is not in the transition table.
        """
        self.status.assert_transition(target)
        self.status = target

    def serialize(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "code": self.code,
            "brand": self.brand,
            "model_name": self.model_name,
            "color": self.color,
            "status": self.status,
            "hourly_rate": self.hourly_rate,
            "site_id": self.site_id,
            "current_location": serialize_point(self.location),
            "purchased_on": self.purchased_on,
        }

    def __str__(self):
        return f"[{self.status.value}] {self.code}"
