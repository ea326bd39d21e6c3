"""SQLAlchemy models for StayBook.

All models are imported here so that Alembic's autogenerate can discover
them via Base.metadata. If you add a new model, import it in this file.
"""

from staybook.models.availability import Availability
from staybook.models.booking import Booking
from staybook.models.property import Property

__all__ = [
    "Availability",
    "Booking",
    "Property",
]
