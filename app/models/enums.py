"""Closed vocabularies shared by models, schemas and services."""

from __future__ import annotations

from enum import Enum


class SignalType(str, Enum):
    """Category of a partner signal."""

    FUNDING = "funding"
    MARKETPLACE = "marketplace"
    LAUNCH = "launch"
    HIRE = "hire"
    CHANGELOG = "changelog"
    PR = "pr"
    BLOG = "blog"


class ObjectiveType(str, Enum):
    """Kind of partnership goal a user can set."""

    INTEGRATIONS = "integrations"
    CO_SELL = "co_sell"
    CO_MARKET = "co_market"
    MARKETPLACE = "marketplace"
    GEOGRAPHY = "geography"
    VERTICAL = "vertical"


class FeedbackType(str, Enum):
    """User verdict on an insight."""

    THUMBS_UP = "thumbs_up"
    THUMBS_DOWN = "thumbs_down"
    NA = "na"


class InsightStatus(str, Enum):
    """Outreach workflow status. Declaration order is the allowed direction of travel."""

    PENDING = "pending"
    READY_TO_SEND = "ready_to_send"
    APPROVED = "approved"
    SENT = "sent"


class WeightDimension(str, Enum):
    """Which lookup table a preference weight belongs to."""

    SIGNAL_TYPE = "signal_type"
    OBJECTIVE_TYPE = "objective_type"


SIGNAL_TYPES: frozenset[str] = frozenset(t.value for t in SignalType)
OBJECTIVE_TYPES: frozenset[str] = frozenset(t.value for t in ObjectiveType)
FEEDBACK_TYPES: frozenset[str] = frozenset(t.value for t in FeedbackType)
