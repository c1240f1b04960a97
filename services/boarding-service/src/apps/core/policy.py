# services/boarding-service/src/apps/core/policy.py
"""
Boarding Policy

Immutable view of the ``BOARDING_POLICY`` settings dict. Services receive a
``BoardingPolicy`` instance; tests derive variants with ``dataclasses.replace``.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple

from django.conf import settings

logger = logging.getLogger(__name__)

DEFAULT_LARGE_SIZE_TAGS = ('Gros chien',)


@dataclass(frozen=True)
class CapacityLimits:
    daily_max: int = 5
    large_category_max: int = 2
    felin_max: int = 8
    large_size_tags: Tuple[str, ...] = DEFAULT_LARGE_SIZE_TAGS


@dataclass(frozen=True)
class CancellationRules:
    free_cancellation_days: int = 3
    partial_refund_percent: int = 50
    no_refund_hours: int = 24


@dataclass(frozen=True)
class Tariffs:
    """Per-animal day rates and surcharges, all in the policy currency."""

    flash_half_day: Decimal = Decimal('12.00')
    flash_full_day: Decimal = Decimal('20.00')
    flash_half_day_max_hours: int = 4
    sejour_day: Decimal = Decimal('25.00')
    sejour_multi_animal_discount_percent: int = 10
    sejour_late_surcharge: Decimal = Decimal('12.00')
    felin_day: Decimal = Decimal('15.00')
    felin_late_surcharge: Decimal = Decimal('8.00')
    late_departure_threshold_hours: int = 2
    default_day: Decimal = Decimal('25.00')
    default_large_day: Decimal = Decimal('30.00')
    large_size_tags: Tuple[str, ...] = DEFAULT_LARGE_SIZE_TAGS


@dataclass(frozen=True)
class BoardingPolicy:
    capacity: CapacityLimits = field(default_factory=CapacityLimits)
    cancellation: CancellationRules = field(default_factory=CancellationRules)
    tariffs: Tariffs = field(default_factory=Tariffs)
    min_lead_hours: int = 24
    hold_ttl_minutes: int = 15
    limited_threshold: int = 2
    strict_holds: bool = False
    currency: str = 'eur'
    cancel_token_ttl_days: int = 7

    @property
    def hold_ttl_seconds(self) -> int:
        return self.hold_ttl_minutes * 60


def build_policy(config: Optional[Dict[str, Any]] = None) -> BoardingPolicy:
    """Build a BoardingPolicy from a settings-style dict; missing keys keep defaults."""
    if config is None:
        config = getattr(settings, 'BOARDING_POLICY', {}) or {}

    capacity_cfg = dict(config.get('capacity', {}))
    large_tags = tuple(capacity_cfg.pop('large_size_tags', DEFAULT_LARGE_SIZE_TAGS))
    capacity = CapacityLimits(large_size_tags=large_tags, **capacity_cfg)

    cancellation = CancellationRules(**config.get('cancellation', {}))

    tariff_cfg = {}
    for key, value in config.get('tariffs', {}).items():
        default = getattr(Tariffs, key)
        tariff_cfg[key] = Decimal(str(value)) if isinstance(default, Decimal) else value
    tariffs = Tariffs(large_size_tags=large_tags, **tariff_cfg)

    scalars = {
        key: config[key]
        for key in (
            'min_lead_hours', 'hold_ttl_minutes', 'limited_threshold',
            'strict_holds', 'currency', 'cancel_token_ttl_days',
        )
        if key in config
    }

    return BoardingPolicy(
        capacity=capacity,
        cancellation=cancellation,
        tariffs=tariffs,
        **scalars
    )


_policy: Optional[BoardingPolicy] = None


def get_policy() -> BoardingPolicy:
    """Process-wide policy, built once from settings."""
    global _policy
    if _policy is None:
        _policy = build_policy()
        logger.info(
            "Boarding policy loaded",
            extra={
                'daily_max': _policy.capacity.daily_max,
                'felin_max': _policy.capacity.felin_max,
                'strict_holds': _policy.strict_holds,
            }
        )
    return _policy


def reset_policy_cache():
    """Drop the cached policy so the next call re-reads settings."""
    global _policy
    _policy = None
