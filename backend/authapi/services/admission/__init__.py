"""Request admission (fixed-window rate limiting)."""

from __future__ import annotations

from .limiter import AdmissionLimiters, FixedWindowLimiter, RateWindowEntry

__all__ = ["AdmissionLimiters", "FixedWindowLimiter", "RateWindowEntry"]
