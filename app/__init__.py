"""PartnerPulse: partner signal scoring and insight service."""

__version__ = "0.1.0"
