"""
Listeners
---------

Keeps a log of the transitions the managers commit. Subscribing
happens when the listener is created, and every committed transition
is logged and counted by the name of its event.
"""

from collections import Counter

from fleet import logger
from fleet.models import Bicycle, Event, EventParticipant, MaintenanceRecord, Rental, User
from fleet.pricing import RentalPrice
from fleet.service.manager.event_manager import EventManager, RegistrationEvent
from fleet.service.manager.maintenance_manager import MaintenanceManager, MaintenanceEvent
from fleet.service.manager.rental_manager import RentalManager, RentalEvent


class TransitionLogger:
    """
    This service keeps a record of the transitions in the system.
    """

    def __init__(self, rental_manager: RentalManager, event_manager: EventManager,
                 maintenance_manager: MaintenanceManager):
        rental_manager.hub.subscribe(RentalEvent.rental_started, self.rental_started)
        rental_manager.hub.subscribe(RentalEvent.rental_ended, self.rental_ended)
        rental_manager.hub.subscribe(RentalEvent.rental_cancelled, self.rental_cancelled)
        event_manager.hub.subscribe(RegistrationEvent.participant_registered, self.participant_registered)
        event_manager.hub.subscribe(RegistrationEvent.participant_unregistered, self.participant_unregistered)
        event_manager.hub.subscribe(RegistrationEvent.attendance_marked, self.attendance_marked)
        maintenance_manager.hub.subscribe(MaintenanceEvent.maintenance_scheduled, self.maintenance_scheduled)
        maintenance_manager.hub.subscribe(MaintenanceEvent.maintenance_completed, self.maintenance_completed)
        self.counts = Counter()

    def rental_started(self, user: User, bike: Bicycle, rental: Rental):
        self.counts["rental_started"] += 1
        logger.info("Rental %s started: user %s has bike %s", rental.id, user.id, bike.code)

    def rental_ended(self, user: User, bike: Bicycle, rental: Rental, price: RentalPrice):
        self.counts["rental_ended"] += 1
        logger.info(
            "Rental %s ended: user %s paid %s for %s hour(s) on bike %s (%s%% off)",
            rental.id, user.id, price.total_amount, price.billed_hours, bike.code, price.discount_percentage
        )

    def rental_cancelled(self, user: User, bike: Bicycle, rental: Rental):
        self.counts["rental_cancelled"] += 1
        logger.info("Rental %s cancelled: user %s released bike %s", rental.id, user.id, bike.code)

    def participant_registered(self, user: User, event: Event, participant: EventParticipant):
        self.counts["participant_registered"] += 1
        logger.info("User %s registered for event %s (%s)", user.id, event.id, event)

    def participant_unregistered(self, user: User, event: Event, participant: EventParticipant):
        self.counts["participant_unregistered"] += 1
        logger.info("User %s unregistered from event %s (%s)", user.id, event.id, event)

    def attendance_marked(self, event: Event, participant: EventParticipant):
        self.counts["attendance_marked"] += 1
        logger.info("User %s marked %s at event %s", participant.user_id, participant.attendance_status.value,
                    event.id)

    def maintenance_scheduled(self, bike: Bicycle, record: MaintenanceRecord):
        self.counts["maintenance_scheduled"] += 1
        logger.info("Bike %s taken in for %s maintenance", bike.code, record.maintenance_type.value)

    def maintenance_completed(self, bike: Bicycle, record: MaintenanceRecord):
        self.counts["maintenance_completed"] += 1
        logger.info("Bike %s finished maintenance %s and is %s", bike.code, record.id, bike.status.value)
