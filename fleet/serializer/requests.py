"""
Request Serializers
-------------------

Validates the input to the managers and access functions. Each schema
loads a request body into the keyword arguments of the operation it
belongs to, so a view can simply do:

>>> data = StartRentalSchema().load(request_body)
>>> rental = await rental_manager.start(**data)

Invalid input raises a :class:`~marshmallow.ValidationError` holding
the messages for every failing field.
"""

from datetime import datetime, timezone

from marshmallow import Schema, ValidationError, validates, post_load
from marshmallow.fields import Integer, String, Email, Enum, AwareDateTime, Date
from marshmallow.validate import Length, Range

from fleet.models.util import PaymentMethod, MaintenanceType, EventStatus, UserRole
from fleet.pricing import TIER_DISCOUNTS
from .fields import PointField, Money


def Identifier(**kwargs):
    """The id of a resource in the store."""
    return Integer(strict=True, validate=Range(min=1), **kwargs)


def Timestamp(**kwargs):
    return AwareDateTime(default_timezone=timezone.utc, **kwargs)


class StartRentalSchema(Schema):
    rider = Identifier(required=True)
    bicycle = Identifier(required=True)
    start_location = PointField()


class FinishRentalSchema(Schema):
    rental = Identifier(required=True)
    end_location = PointField()
    payment_method = Enum(PaymentMethod, by_value=True)
    transaction_id = String(validate=Length(max=100))


class CancelRentalSchema(Schema):
    rental = Identifier(required=True)


class RegistrationSchema(Schema):
    """Used to register for, or unregister from, an event."""

    rider = Identifier(required=True)
    event = Identifier(required=True)


class AttendanceSchema(Schema):
    event = Identifier(required=True)
    rider = Identifier(required=True)


class ScheduleMaintenanceSchema(Schema):
    bicycle = Identifier(required=True)
    maintenance_type = Enum(MaintenanceType, by_value=True, required=True)
    cost = Money(required=True, validate=Range(min=0))
    performed_by = String(validate=Length(max=150))
    description = String()
    next_due_at = Timestamp()


class CompleteMaintenanceSchema(Schema):
    record = Identifier(required=True)


class CreateSiteSchema(Schema):
    name = String(required=True, validate=Length(min=1, max=150))
    city = String(required=True, validate=Length(min=1, max=100))
    region = String(required=True, validate=Length(min=1, max=100))
    address = String(validate=Length(max=255))


class CreateUserSchema(Schema):
    external_id = String(required=True, validate=Length(min=1, max=64))
    first_name = String(required=True, validate=Length(min=1, max=100))
    last_name = String(required=True, validate=Length(min=1, max=100))
    email = Email(required=True)
    tier = Integer(allow_none=True, validate=Range(min=min(TIER_DISCOUNTS), max=max(TIER_DISCOUNTS)))
    role = Enum(UserRole, by_value=True)


class SetTierSchema(Schema):
    tier = Integer(required=True, allow_none=True, validate=Range(min=min(TIER_DISCOUNTS), max=max(TIER_DISCOUNTS)))


class CreateBicycleSchema(Schema):
    code = String(required=True, validate=Length(min=1, max=50))
    brand = String(required=True, validate=Length(min=1, max=100))
    model_name = String(validate=Length(max=100))
    color = String(required=True, validate=Length(min=1, max=50))
    hourly_rate = Money(required=True, validate=Range(min=0))
    site = Identifier(required=True)
    location = PointField()
    purchased_on = Date()

    @post_load
    def normalize_code(self, data, **kwargs):
        data["code"] = data["code"].strip().upper()
        return data


class UpdateLocationSchema(Schema):
    location = PointField(required=True)


class CreateEventSchema(Schema):
    name = String(required=True, validate=Length(min=1, max=200))
    description = String()
    event_type = String(validate=Length(min=1, max=50))
    event_date = Timestamp(required=True)
    meeting_point = String(validate=Length(max=255))
    capacity = Integer(allow_none=True, validate=Range(min=1))
    site = Identifier(required=True)
    created_by = Identifier(required=True)
    status = Enum(EventStatus, by_value=True)

    @validates("event_date")
    def assert_in_future(self, value: datetime, **kwargs):
        if value <= datetime.now(timezone.utc):
            raise ValidationError("Events must be scheduled in the future.")


class UpdateEventCapacitySchema(Schema):
    capacity = Integer(required=True, allow_none=True, validate=Range(min=1))


class SetEventStatusSchema(Schema):
    status = Enum(EventStatus, by_value=True, required=True)
