from decimal import Decimal

import pytest
from shapely.geometry import Point

from fleet.models import Bicycle, Rental, Event, Site, User
from fleet.models.util import BicycleStatus, RentalStatus, AttendanceStatus, EventStatus, PaymentStatus, \
    InvalidTransitionError, resolve_id, to_point, serialize_point


class TestTransitions:

    @pytest.mark.parametrize("current,target", [
        (BicycleStatus.AVAILABLE, BicycleStatus.RENTED),
        (BicycleStatus.AVAILABLE, BicycleStatus.MAINTENANCE),
        (BicycleStatus.AVAILABLE, BicycleStatus.RETIRED),
        (BicycleStatus.RENTED, BicycleStatus.AVAILABLE),
        (BicycleStatus.MAINTENANCE, BicycleStatus.MAINTENANCE),
        (BicycleStatus.MAINTENANCE, BicycleStatus.AVAILABLE),
        (RentalStatus.ACTIVE, RentalStatus.COMPLETED),
        (RentalStatus.ACTIVE, RentalStatus.CANCELLED),
        (AttendanceStatus.REGISTERED, AttendanceStatus.CANCELLED),
        (AttendanceStatus.ATTENDED, AttendanceStatus.ABSENT),
        (AttendanceStatus.ABSENT, AttendanceStatus.ATTENDED),
        (AttendanceStatus.ATTENDED, AttendanceStatus.CANCELLED),
        (AttendanceStatus.ABSENT, AttendanceStatus.CANCELLED),
        (EventStatus.DRAFT, EventStatus.PUBLISHED),
        (EventStatus.PUBLISHED, EventStatus.COMPLETED),
        (PaymentStatus.PENDING, PaymentStatus.PAID),
    ])
    def test_allowed(self, current, target):
        assert current.can_transition(target)
        current.assert_transition(target)

    @pytest.mark.parametrize("current,target", [
        (BicycleStatus.RENTED, BicycleStatus.RENTED),
        (BicycleStatus.RENTED, BicycleStatus.MAINTENANCE),
        (BicycleStatus.RENTED, BicycleStatus.RETIRED),
        (BicycleStatus.RETIRED, BicycleStatus.AVAILABLE),
        (RentalStatus.COMPLETED, RentalStatus.CANCELLED),
        (RentalStatus.CANCELLED, RentalStatus.COMPLETED),
        (RentalStatus.COMPLETED, RentalStatus.ACTIVE),
        (AttendanceStatus.CANCELLED, AttendanceStatus.REGISTERED),
        (AttendanceStatus.CANCELLED, AttendanceStatus.ATTENDED),
        (EventStatus.CANCELLED, EventStatus.PUBLISHED),
        (PaymentStatus.PAID, PaymentStatus.CANCELLED),
    ])
    def test_forbidden(self, current, target):
        assert not current.can_transition(target)
        with pytest.raises(InvalidTransitionError) as error:
            current.assert_transition(target)
        assert error.value.current is current
        assert error.value.target is target

    def test_terminal(self):
        assert BicycleStatus.RETIRED.is_terminal
        assert RentalStatus.COMPLETED.is_terminal
        assert not RentalStatus.ACTIVE.is_terminal
        assert set(RentalStatus.terminating_types()) == {RentalStatus.COMPLETED, RentalStatus.CANCELLED}

    def test_model_transition(self, database):
        """Assert that a model only changes status along the table."""
        rental = Rental(status=RentalStatus.COMPLETED, base_rate=Decimal("1"))
        with pytest.raises(InvalidTransitionError):
            rental.transition(RentalStatus.CANCELLED)
        assert rental.status is RentalStatus.COMPLETED

        bike = Bicycle(status=BicycleStatus.AVAILABLE)
        bike.transition(BicycleStatus.RENTED)
        assert bike.status is BicycleStatus.RENTED


def test_resolve_id(database):
    assert resolve_id(3) == 3
    assert resolve_id(Site(id=5)) == 5
    with pytest.raises(TypeError):
        resolve_id("3")
    with pytest.raises(TypeError):
        resolve_id(True)


def test_points():
    assert to_point(None, 1.0) is None
    assert to_point(-3.2, 55.9).equals(Point(-3.2, 55.9))
    assert serialize_point(None) is None
    assert serialize_point(Point(1, 2)) == {"type": "Point", "coordinates": (1.0, 2.0)}


def test_bicycle_location(database):
    """Assert that the location of a bicycle is stored as longitude and latitude."""
    bike = Bicycle()
    bike.location = Point(-3.19, 55.95)
    assert (bike.longitude, bike.latitude) == (-3.19, 55.95)
    assert bike.location.equals(Point(-3.19, 55.95))
    bike.location = None
    assert bike.location is None


def test_event_has_space(database):
    assert Event(capacity=None, current_participants=100).has_space()
    assert Event(capacity=2, current_participants=1).has_space()
    assert not Event(capacity=2, current_participants=2).has_space()


async def test_rental_serialize_active(random_rental):
    """Assert that an active rental carries its estimate but no totals."""
    data = random_rental.serialize(estimated_price=Decimal("5000"))
    assert data["is_active"]
    assert data["estimated_price"] == Decimal("5000")
    assert "total_amount" not in data
    assert data["start_location"]["type"] == "Point"


async def test_rental_serialize_completed(rental_manager, random_rental):
    rental = await rental_manager.finish(random_rental)
    data = rental.serialize(estimated_price=Decimal("1"))
    assert not data["is_active"]
    assert "estimated_price" not in data
    assert data["total_amount"] == rental.total_amount
    assert data["end_time"] == rental.end_time


async def test_rental_serialize_cancelled(rental_manager, random_rental):
    rental = await rental_manager.cancel(random_rental)
    data = rental.serialize()
    assert data["cancel_time"] == rental.end_time
    assert "total_amount" not in data


async def test_bicycle_serialize(random_bike):
    data = random_bike.serialize()
    assert data["code"] == random_bike.code
    assert data["status"] is BicycleStatus.AVAILABLE
    assert data["current_location"]["type"] == "Point"


async def test_user_serialize(random_user):
    data = random_user.serialize()
    assert data["first_name"] == random_user.first_name
    assert data["last_name"] == random_user.last_name
    assert random_user.last_name in str(random_user)

    stored = await User.filter(last_name=random_user.last_name).first()
    assert stored.id == random_user.id
