from datetime import timedelta

from fleet.models import Rental


async def backdate(rental: Rental, delta: timedelta) -> Rental:
    """Moves the start of a rental back in time, as if it had been running for ``delta``."""
    rental.start_time = rental.start_time - delta
    await Rental.filter(id=rental.id).update(start_time=rental.start_time)
    return rental
