"""Pydantic schemas for request/response validation."""

from app.schemas.auth import LoginRequest, SignupRequest, TokenResponse, UserRead
from app.schemas.digest import DigestItemRead, DigestResponse
from app.schemas.insight import (
    BatchApproveRequest,
    BatchApproveResponse,
    FeedbackRequest,
    InsightRead,
    InsightWithSignal,
    StatusUpdateRequest,
)
from app.schemas.objective import ObjectiveCreate, ObjectiveRead, ObjectiveUpdate
from app.schemas.partner import PartnerCreate, PartnerRead, PartnerUpdate
from app.schemas.signal import SignalRead

__all__ = [
    # Auth
    "LoginRequest",
    "SignupRequest",
    "TokenResponse",
    "UserRead",
    # Partners
    "PartnerCreate",
    "PartnerUpdate",
    "PartnerRead",
    # Objectives
    "ObjectiveCreate",
    "ObjectiveUpdate",
    "ObjectiveRead",
    # Signals
    "SignalRead",
    # Insights
    "InsightRead",
    "InsightWithSignal",
    "FeedbackRequest",
    "StatusUpdateRequest",
    "BatchApproveRequest",
    "BatchApproveResponse",
    # Digest
    "DigestItemRead",
    "DigestResponse",
]
