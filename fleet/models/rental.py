"""
Rental
---------------------------

A rental ties a rider to a bicycle for a span of time. The base rate
is copied from the bicycle when the rental starts so later price changes
do not affect it, and the amounts are only filled in once it is returned.
"""

from datetime import datetime
from decimal import Decimal
from typing import Dict, Any, Optional

from shapely.geometry import Point
from tortoise import Model, fields

from fleet.models.util import RentalStatus, PaymentStatus, PaymentMethod, PaymentRecordStatus, \
    to_point, serialize_point


class Rental(Model):
    id = fields.IntField(primary_key=True)
    user = fields.ForeignKeyField("models.User", related_name="rentals")
    bike = fields.ForeignKeyField("models.Bicycle", related_name="rentals")

    start_time: datetime = fields.DatetimeField()
    end_time: Optional[datetime] = fields.DatetimeField(null=True)
    start_longitude = fields.FloatField(null=True)
    start_latitude = fields.FloatField(null=True)
    end_longitude = fields.FloatField(null=True)
    end_latitude = fields.FloatField(null=True)

    base_rate: Decimal = fields.DecimalField(max_digits=12, decimal_places=2)
    discount_percentage = fields.SmallIntField(default=0)
    billed_hours = fields.IntField(null=True)
    subtotal = fields.DecimalField(max_digits=12, decimal_places=2, null=True)
    discount_amount = fields.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0"))
    total_amount = fields.DecimalField(max_digits=12, decimal_places=2, null=True)

    payment_status = fields.CharEnumField(PaymentStatus, max_length=16, default=PaymentStatus.PENDING)
    status = fields.CharEnumField(RentalStatus, max_length=16, default=RentalStatus.ACTIVE)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    @property
    def start_location(self) -> Optional[Point]:
        return to_point(self.start_longitude, self.start_latitude)

    @start_location.setter
    def start_location(self, point: Optional[Point]):
        self.start_longitude, self.start_latitude = (point.x, point.y) if point is not None else (None, None)

    @property
    def end_location(self) -> Optional[Point]:
        return to_point(self.end_longitude, self.end_latitude)

    @end_location.setter
    def end_location(self, point: Optional[Point]):
        self.end_longitude, self.end_latitude = (point.x, point.y) if point is not None else (None, None)

    @property
    def is_active(self) -> bool:
        return self.status is RentalStatus.ACTIVE

    def transition(self, target: RentalStatus):
        """
        Moves the rental to the target status.

        :raises InvalidTransitionError: If the rental is already completed or cancelled.
        """
        self.status.assert_transition(target)
        self.status = target

    def serialize(self, *, estimated_price: Decimal = None) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "user_id": self.user_id,
            "bike_id": self.bike_id,
            "start_time": self.start_time,
            "status": self.status,
            "payment_status": self.payment_status,
            "is_active": self.is_active,
            "base_rate": self.base_rate,
            "discount_percentage": self.discount_percentage,
        }

        if self.start_location is not None:
            data["start_location"] = serialize_point(self.start_location)

        if self.status is RentalStatus.COMPLETED:
            data["end_time"] = self.end_time
            data["billed_hours"] = self.billed_hours
            data["subtotal"] = self.subtotal
            data["discount_amount"] = self.discount_amount
            data["total_amount"] = self.total_amount
            if self.end_location is not None:
                data["end_location"] = serialize_point(self.end_location)
        elif self.status is RentalStatus.CANCELLED:
            data["cancel_time"] = self.end_time
        elif estimated_price is not None:
            data["estimated_price"] = estimated_price

        return data

    def __str__(self):
        return f"[{self.status.value}] rental {self.id} of bike {self.bike_id} by user {self.user_id}"


class Payment(Model):
    """A payment entry written when a rental is returned."""

    id = fields.IntField(primary_key=True)
    rental = fields.ForeignKeyField("models.Rental", related_name="payments")
    amount = fields.DecimalField(max_digits=12, decimal_places=2)
    method = fields.CharEnumField(PaymentMethod, max_length=16, default=PaymentMethod.CARD)
    paid_at = fields.DatetimeField(auto_now_add=True)
    transaction_id = fields.CharField(max_length=100, null=True)
    status = fields.CharEnumField(PaymentRecordStatus, max_length=16, default=PaymentRecordStatus.COMPLETED)

    def serialize(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "rental_id": self.rental_id,
            "amount": self.amount,
            "method": self.method,
            "paid_at": self.paid_at,
            "status": self.status,
        }
