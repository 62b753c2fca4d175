"""
.. autoclasstree:: fleet.service

The service layer for the system. Acts as the internal API.
Each interface (REST API, web-sockets) should use the
service layer to implement their logic.

The access modules read and write single resources, while
the managers coordinate the transitions that span several
resources inside a single transaction.
"""

from .errors import (
    FleetError, RiderNotFoundError, RiderExistsError, RiderAlreadyRentingError, BicycleNotFoundError,
    BicycleNotAvailableError, BicycleCodeExistsError, BicycleInUseError, RentalNotFoundError, RentalNotActiveError,
    SiteNotFoundError, EventNotFoundError, EventInPastError, EventFullError, EventHasParticipantsError,
    CapacityBelowParticipantsError, AlreadyRegisteredError, NotRegisteredError, MaintenanceRecordNotFoundError,
    InvalidTransitionError, InvalidRentalWindowError,
)

from .manager.rental_manager import RentalManager, RentalEvent
from .manager.event_manager import EventManager, RegistrationEvent
from .manager.maintenance_manager import MaintenanceManager, MaintenanceEvent
from .listeners import TransitionLogger
