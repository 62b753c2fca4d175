"""
.. autoclasstree:: fleet.serializer

The serializers validate the input to the system, and shape its output.
"""

from .models import SiteSchema, UserSchema, BicycleSchema, RentalSchema, PaymentSchema, ParticipantSchema, \
    EventSchema, MaintenanceRecordSchema
from .requests import StartRentalSchema, FinishRentalSchema, CancelRentalSchema, RegistrationSchema, \
    AttendanceSchema, ScheduleMaintenanceSchema, CompleteMaintenanceSchema, CreateSiteSchema, CreateUserSchema, \
    SetTierSchema, CreateBicycleSchema, UpdateLocationSchema, CreateEventSchema, UpdateEventCapacitySchema, \
    SetEventStatusSchema
