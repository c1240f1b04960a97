# services/boarding-service/src/apps/core/models/__init__.py
"""
Boarding Service Models
"""

from .booking import Booking, normalize_service_id
from .capacity_hold import CapacityHold, CapacityLock

__all__ = [
    'Booking',
    'CapacityHold',
    'CapacityLock',
    'normalize_service_id',
]
