# services/boarding-service/src/apps/core/services/refunds.py
"""
Cancellation Refund Policy

Full refund up to ``free_cancellation_days`` before the stay, a partial
refund until ``no_refund_hours`` before, nothing after.
"""

from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Union

from shared.common.utils import ceil_timedelta, round_decimal, start_of_day

from apps.core.policy import BoardingPolicy

ZERO = Decimal('0.00')


def refund_for(
    total: Decimal,
    stay_start: Union[date, datetime],
    now: datetime,
    *,
    policy: BoardingPolicy
) -> Decimal:
    """
    Amount to refund when cancelling at ``now``.

    Days and hours until the stay are exact ceilings, so 2 days 23 hours
    counts as 3 days and 23h30 counts as 24 hours.
    """
    total = Decimal(str(total))
    if not isinstance(stay_start, datetime):
        stay_start = start_of_day(stay_start)

    delta = stay_start - now
    days_until = ceil_timedelta(delta, timedelta(days=1))
    hours_until = ceil_timedelta(delta, timedelta(hours=1))

    rules = policy.cancellation
    if days_until >= rules.free_cancellation_days:
        refund = total
    elif hours_until >= rules.no_refund_hours:
        refund = total * Decimal(rules.partial_refund_percent) / 100
    else:
        refund = ZERO

    return min(round_decimal(refund), round_decimal(total))


def describe_refund(amount: Decimal, total: Decimal, policy: BoardingPolicy) -> str:
    """Customer-facing sentence for a computed refund."""
    amount = Decimal(str(amount or 0))
    if amount > 0 and amount == Decimal(str(total)):
        return 'Full refund processed'
    if amount > 0:
        return f"Partial refund ({policy.cancellation.partial_refund_percent}%) processed"
    return 'No refund according to the cancellation policy'


def describe_policy(policy: BoardingPolicy) -> dict:
    """Cancellation rules in the numbers and the languages shown to customers."""
    rules = policy.cancellation
    days = rules.free_cancellation_days
    percent = rules.partial_refund_percent
    hours = rules.no_refund_hours
    return {
        'policy': {
            'free_cancellation_days': days,
            'partial_refund_percent': percent,
            'no_refund_hours': hours,
        },
        'description': {
            'en': {
                'title': 'Cancellation policy',
                'rules': [
                    f"Free cancellation up to {days} days before",
                    f"{percent}% refund between {days} days and {hours} hours before",
                    f"No refund less than {hours} hours before",
                ],
            },
            'fr': {
                'title': "Politique d'annulation",
                'rules': [
                    f"Annulation gratuite jusqu'à {days} jours avant",
                    f"Remboursement de {percent}% entre {days} jours et {hours} heures avant",
                    f"Aucun remboursement moins de {hours} heures avant",
                ],
            },
            'es': {
                'title': 'Política de cancelación',
                'rules': [
                    f"Cancelación gratuita hasta {days} días antes",
                    f"Reembolso del {percent}% entre {days} días y {hours} horas antes",
                    f"Sin reembolso con menos de {hours} horas de anticipación",
                ],
            },
        },
    }
