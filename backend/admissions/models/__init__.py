"""ORM models: importing this package registers every table with Base.metadata."""
from admissions.models.event import Event, EventCategory, EventStatus  # noqa: F401
from admissions.models.registration import Registration, RegistrationStatus  # noqa: F401
from admissions.models.favorite import Favorite, ItemType  # noqa: F401
