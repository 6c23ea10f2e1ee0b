# Import all models so Base.metadata knows every table
from app.models.profile import Profile
from app.models.service import Service
from app.models.booking import Booking
from app.models.payment import Payment
from app.models.subscription import Subscription

__all__ = ["Profile", "Service", "Booking", "Payment", "Subscription"]
