"""
Model Serializers
-----------------

Defines serializers for the various models in the system. Each schema
dumps the dictionary the model's ``serialize`` method produces.
"""

from marshmallow import Schema, validates_schema, ValidationError
from marshmallow.fields import Integer, Boolean, String, Email, Enum, DateTime, Date

from fleet.models.util import BicycleStatus, RentalStatus, PaymentStatus, PaymentMethod, PaymentRecordStatus, \
    AttendanceStatus, EventStatus, MaintenanceType
from .fields import PointField, Money, Many


class SiteSchema(Schema):
    id = Integer()
    name = String(required=True)
    city = String(required=True)
    region = String(required=True)
    address = String(allow_none=True)


class UserSchema(Schema):
    """The schema corresponding to the :class:`~fleet.models.user.User` model."""

    id = Integer()
    external_id = String(required=True)
    first_name = String(required=True)
    last_name = String(required=True)
    email = Email(required=True)
    tier = Integer(allow_none=True)


class BicycleSchema(Schema):
    id = Integer()
    code = String(required=True)
    brand = String(required=True)
    model_name = String(allow_none=True)
    color = String(required=True)
    status = Enum(BicycleStatus, by_value=True, required=True)
    hourly_rate = Money(required=True)
    site_id = Integer(required=True)
    current_location = PointField(allow_none=True)
    purchased_on = Date(allow_none=True)


class RentalSchema(Schema):
    id = Integer(required=True)
    user_id = Integer(required=True)
    bike_id = Integer(required=True)

    start_time = DateTime(required=True)
    end_time = DateTime()
    cancel_time = DateTime()
    start_location = PointField()
    end_location = PointField()

    status = Enum(RentalStatus, by_value=True, required=True)
    payment_status = Enum(PaymentStatus, by_value=True, required=True)
    is_active = Boolean(required=True)

    base_rate = Money(required=True)
    discount_percentage = Integer()
    billed_hours = Integer()
    subtotal = Money()
    discount_amount = Money()
    total_amount = Money()
    estimated_price = Money()

    @validates_schema
    def assert_end_time_with_price(self, data, **kwargs):
        """
        Asserts that when a rental is complete both the price and end time are included.
        """
        if "total_amount" in data and "end_time" not in data:
            raise ValidationError("If the price is included, you must also include the end time.")
        elif "total_amount" not in data and "end_time" in data:
            raise ValidationError("If the end time is included, you must also include the price.")
        if "total_amount" in data and "estimated_price" in data:
            raise ValidationError("Rental should have one of either total_amount or estimated_price.")

    @validates_schema
    def assert_status_matches_active(self, data, **kwargs):
        if "status" in data and "is_active" in data and data["is_active"] != (data["status"] is RentalStatus.ACTIVE):
            raise ValidationError("Only an active rental may be marked active.")


class PaymentSchema(Schema):
    id = Integer()
    rental_id = Integer(required=True)
    amount = Money(required=True)
    method = Enum(PaymentMethod, by_value=True, required=True)
    paid_at = DateTime(required=True)
    status = Enum(PaymentRecordStatus, by_value=True, required=True)


class ParticipantSchema(Schema):
    id = Integer()
    event_id = Integer(required=True)
    user_id = Integer(required=True)
    registered_at = DateTime(required=True)
    attendance_status = Enum(AttendanceStatus, by_value=True, required=True)


class EventSchema(Schema):
    id = Integer()
    name = String(required=True)
    description = String(allow_none=True)
    event_type = String(required=True)
    event_date = DateTime(required=True)
    meeting_point = String(allow_none=True)
    capacity = Integer(allow_none=True)
    current_participants = Integer(required=True)
    site_id = Integer(required=True)
    status = Enum(EventStatus, by_value=True, required=True)
    participants = Many(ParticipantSchema)

    @validates_schema
    def assert_within_capacity(self, data, **kwargs):
        """Asserts that the participant count is between zero and the capacity."""
        capacity = data.get("capacity")
        count = data.get("current_participants", 0)
        if count < 0:
            raise ValidationError("An event cannot have a negative number of participants.")
        if capacity is not None and count > capacity:
            raise ValidationError("An event cannot have more participants than its capacity.")


class MaintenanceRecordSchema(Schema):
    id = Integer()
    bike_id = Integer(required=True)
    maintenance_type = Enum(MaintenanceType, by_value=True, required=True)
    description = String(allow_none=True)
    cost = Money(required=True)
    performed_by = String(allow_none=True)
    performed_at = DateTime(required=True)
    next_due_at = DateTime(allow_none=True)
    completed_at = DateTime()
