"""
Contract Tracker - Contract Status
Derives the display status of a contract from its dates and renewal terms.
"""

from dataclasses import dataclass
from datetime import date
from typing import Dict, Any, Optional

from dateutil.relativedelta import relativedelta

from contract_tracker.models import Contract, MONTHLY, YEARLY

DRAFT = 'Draft'
UPCOMING = 'Upcoming'
ACTIVE = 'Active'
AUTO_RENEWS = 'Auto-renews'
RENEWAL_NOTICE_DUE = 'Renewal notice due'
EXPIRING_SOON = 'Expiring soon'
EXPIRED = 'Expired'

STATUSES = [DRAFT, UPCOMING, ACTIVE, AUTO_RENEWS, RENEWAL_NOTICE_DUE, EXPIRING_SOON, EXPIRED]


@dataclass(frozen=True)
class ContractStatus:
    label: str
    days_remaining: Optional[int] = None
    next_renewal_date: Optional[date] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'status': self.label,
            'days_remaining': self.days_remaining,
            'next_renewal_date': self.next_renewal_date.isoformat() if self.next_renewal_date else None,
        }


def _renewal_offset(renewal_type: str, periods: int) -> relativedelta:
    if renewal_type == MONTHLY:
        return relativedelta(months=periods)
    return relativedelta(years=periods)


def next_renewal_date(start_date: date, renewal_type: Optional[str], today: date) -> Optional[date]:
    """First monthly or yearly anniversary of start_date falling on or after today."""
    if renewal_type == MONTHLY:
        periods = max(0, (today.year - start_date.year) * 12 + today.month - start_date.month)
    elif renewal_type == YEARLY:
        periods = max(0, today.year - start_date.year)
    else:
        return None

    # Offsets are taken from start_date each time so month-end days do not drift
    candidate = start_date + _renewal_offset(renewal_type, periods)
    if candidate < today:
        candidate = start_date + _renewal_offset(renewal_type, periods + 1)
    return candidate


def derive_status(contract: Contract, today: date) -> ContractStatus:
    """Status label shown in the contract list and detail views."""
    if contract.start_date is None:
        return ContractStatus(DRAFT)
    if contract.start_date > today:
        return ContractStatus(UPCOMING, days_remaining=(contract.start_date - today).days)

    if contract.end_date is not None and contract.end_date < today:
        return ContractStatus(EXPIRED, days_remaining=(contract.end_date - today).days)

    notice = contract.notice_period_days

    renewal = next_renewal_date(contract.start_date, contract.renewal_type, today)
    if renewal is not None and (contract.end_date is None or renewal <= contract.end_date):
        days = (renewal - today).days
        label = RENEWAL_NOTICE_DUE if days <= notice else AUTO_RENEWS
        return ContractStatus(label, days_remaining=days, next_renewal_date=renewal)

    if contract.end_date is None:
        return ContractStatus(ACTIVE)

    days = (contract.end_date - today).days
    if days <= notice:
        return ContractStatus(EXPIRING_SOON, days_remaining=days)
    return ContractStatus(ACTIVE, days_remaining=days)
