"""
Errors
------

The failures the coordinators raise when a precondition does not hold.
Each is raised inside the operation's transaction, so nothing it did
is committed.
"""

from fleet.models.util import InvalidTransitionError
from fleet.pricing import InvalidRentalWindowError


class FleetError(Exception):
    """The base for every business failure in the system."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class RiderNotFoundError(FleetError):
    pass


class RiderExistsError(FleetError):
    pass


class RiderAlreadyRentingError(FleetError):
    """Raised when a rider tries to start a rental while one is active."""

    def __init__(self, message, rental_id: int = None):
        super().__init__(message)
        self.rental_id = rental_id


class BicycleNotFoundError(FleetError):
    pass


class BicycleNotAvailableError(FleetError):
    """Raised when a bicycle is rented, in maintenance or retired."""

    def __init__(self, message, status=None):
        super().__init__(message)
        self.status = status


class BicycleCodeExistsError(FleetError):
    pass


class BicycleInUseError(FleetError):
    pass


class RentalNotFoundError(FleetError):
    pass


class RentalNotActiveError(FleetError):
    pass


class SiteNotFoundError(FleetError):
    pass


class EventNotFoundError(FleetError):
    pass


class EventInPastError(FleetError):
    pass


class EventFullError(FleetError):

    def __init__(self, message, capacity: int = None):
        super().__init__(message)
        self.capacity = capacity


class EventHasParticipantsError(FleetError):
    pass


class CapacityBelowParticipantsError(FleetError):
    pass


class AlreadyRegisteredError(FleetError):
    pass


class NotRegisteredError(FleetError):
    pass


class MaintenanceRecordNotFoundError(FleetError):
    pass
