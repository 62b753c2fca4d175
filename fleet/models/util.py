from enum import Enum
from typing import Union, Dict, Optional, FrozenSet, Tuple

from shapely.geometry import Point, mapping
from tortoise import Model


class InvalidTransitionError(ValueError):
    """Raised when a status is asked to move to a state its transition table does not list."""

    def __init__(self, current, target):
        super().__init__(f"Cannot transition from {current.value} to {target.value}.")
        self.current = current
        self.target = target


class StatusEnum(str, Enum):
    """
    A status with an explicit transition table.

    Subclasses implement :meth:`transitions`, mapping each
    state to the set of states it may move to.
    """

    @classmethod
    def transitions(cls) -> Dict['StatusEnum', FrozenSet['StatusEnum']]:
        raise NotImplementedError

    def can_transition(self, target: 'StatusEnum') -> bool:
        return target in self.transitions().get(self, frozenset())

    def assert_transition(self, target: 'StatusEnum'):
        if not self.can_transition(target):
            raise InvalidTransitionError(self, target)

    @property
    def is_terminal(self) -> bool:
        return not self.transitions().get(self)


class BicycleStatus(StatusEnum):
    AVAILABLE = "available"
    RENTED = "rented"
    MAINTENANCE = "maintenance"
    RETIRED = "retired"

    @classmethod
    def transitions(cls):
        return {
            cls.AVAILABLE: frozenset((cls.RENTED, cls.MAINTENANCE, cls.RETIRED)),
            cls.RENTED: frozenset((cls.AVAILABLE,)),
            cls.MAINTENANCE: frozenset((cls.AVAILABLE, cls.MAINTENANCE, cls.RETIRED)),
            cls.RETIRED: frozenset(),
        }


class RentalStatus(StatusEnum):
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @classmethod
    def transitions(cls):
        return {
            cls.ACTIVE: frozenset((cls.COMPLETED, cls.CANCELLED)),
            cls.COMPLETED: frozenset(),
            cls.CANCELLED: frozenset(),
        }

    @staticmethod
    def terminating_types() -> Tuple['RentalStatus', 'RentalStatus']:
        """The statuses that result in the end of the rental."""
        return RentalStatus.COMPLETED, RentalStatus.CANCELLED


class PaymentStatus(StatusEnum):
    """The billing state of a rental."""
    PENDING = "pending"
    PAID = "paid"
    CANCELLED = "cancelled"

    @classmethod
    def transitions(cls):
        return {
            cls.PENDING: frozenset((cls.PAID, cls.CANCELLED)),
            cls.PAID: frozenset(),
            cls.CANCELLED: frozenset(),
        }


class AttendanceStatus(StatusEnum):
    REGISTERED = "registered"
    ATTENDED = "attended"
    ABSENT = "absent"
    CANCELLED = "cancelled"

    @classmethod
    def transitions(cls):
        return {
            cls.REGISTERED: frozenset((cls.ATTENDED, cls.ABSENT, cls.CANCELLED)),
            cls.ATTENDED: frozenset((cls.ABSENT, cls.CANCELLED)),
            cls.ABSENT: frozenset((cls.ATTENDED, cls.CANCELLED)),
            cls.CANCELLED: frozenset(),
        }


class EventStatus(StatusEnum):
    DRAFT = "draft"
    PUBLISHED = "published"
    CANCELLED = "cancelled"
    COMPLETED = "completed"

    @classmethod
    def transitions(cls):
        return {
            cls.DRAFT: frozenset((cls.PUBLISHED, cls.CANCELLED)),
            cls.PUBLISHED: frozenset((cls.CANCELLED, cls.COMPLETED)),
            cls.CANCELLED: frozenset(),
            cls.COMPLETED: frozenset(),
        }


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


class MaintenanceType(str, Enum):
    PREVENTIVE = "preventive"
    CORRECTIVE = "corrective"
    INSPECTION = "inspection"
    REPAIR = "repair"
    OTHER = "other"


class PaymentMethod(str, Enum):
    CASH = "cash"
    CARD = "card"
    TRANSFER = "transfer"
    OTHER = "other"


class PaymentRecordStatus(str, Enum):
    """The state of a single payment entry."""
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


def resolve_id(target: Union[Model, int]) -> int:
    if isinstance(target, Model):
        return target.pk
    elif isinstance(target, int) and not isinstance(target, bool):
        return target
    else:
        raise TypeError(f"Target {target} is neither a Model or an int.")


def to_point(longitude: Optional[float], latitude: Optional[float]) -> Optional[Point]:
    """Builds a point from a stored longitude / latitude pair, if both are set."""
    if longitude is None or latitude is None:
        return None
    return Point(longitude, latitude)


def serialize_point(point: Optional[Point]) -> Optional[Dict]:
    """Serializes a point into a GeoJSON geometry."""
    if point is None:
        return None
    return mapping(point)
