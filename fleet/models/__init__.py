"""
The models package contains all the models used on the server.

.. autoclasstree:: fleet.models
"""

from .bicycle import Bicycle
from .event import Event, EventParticipant
from .maintenance import MaintenanceRecord
from .rental import Rental, Payment
from .site import Site
from .user import User
