"""
Maintenance
---------------------------
"""
from typing import Dict, Any

from tortoise import Model, fields
from tortoise.validators import MinValueValidator

from fleet.models.util import MaintenanceType


class MaintenanceRecord(Model):
    """
    A piece of maintenance performed on a bicycle. While any record for
    a bicycle is open (not completed) the bicycle stays in maintenance.
    """

    id = fields.IntField(primary_key=True)
    bike = fields.ForeignKeyField("models.Bicycle", related_name="maintenance_records")
    maintenance_type = fields.CharEnumField(MaintenanceType, max_length=16)
    description = fields.TextField(null=True)
    cost = fields.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(0)])
    performed_by = fields.CharField(max_length=150, null=True)
    performed_at = fields.DatetimeField(auto_now_add=True)
    next_due_at = fields.DatetimeField(null=True)
    completed_at = fields.DatetimeField(null=True)

    @property
    def is_open(self) -> bool:
        return self.completed_at is None

    def serialize(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "bike_id": self.bike_id,
            "maintenance_type": self.maintenance_type,
            "description": self.description,
            "cost": self.cost,
            "performed_by": self.performed_by,
            "performed_at": self.performed_at,
            "next_due_at": self.next_due_at,
        }

        if self.completed_at is not None:
            data["completed_at"] = self.completed_at

        return data
