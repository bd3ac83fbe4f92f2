"""Pydantic response models for the rate endpoints."""

from .rates import CurrentRate, RateHistoryPoint

__all__ = [
    "CurrentRate",
    "RateHistoryPoint",
]
