"""SQLAlchemy models."""

from app.models.insight import Insight
from app.models.objective import Objective
from app.models.partner import Partner
from app.models.preference_weight import PreferenceWeight
from app.models.signal import Signal
from app.models.user import User

__all__ = [
    "Insight",
    "Objective",
    "Partner",
    "PreferenceWeight",
    "Signal",
    "User",
]
