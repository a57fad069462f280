"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .availability import AvailabilityService, BookingStoreProtocol, CommitReport

__all__ = ["AvailabilityService", "BookingStoreProtocol", "CommitReport"]
