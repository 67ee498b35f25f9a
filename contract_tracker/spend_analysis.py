"""
Contract Tracker - Spend Analysis Engine
Computes the financial KPIs shown on the analysis page.

Two groups of figures are produced:

1. Live snapshot KPIs (active contract value, monthly recurring cost,
   annualized spend, one-time value year to date). These depend only on
   today's date and never on the selected date range.
2. Range KPIs (total spend in range, spend by vendor and type, monthly
   trend, top contracts). Recurring costs are prorated over the selected
   interval by whole calendar months; one-time charges are recognized on
   their start date.

Everything here is a pure function of (contracts, interval, today). The
only I/O is the repository fetch in ``load_analysis``.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Any, Iterable, Optional, Protocol, Tuple

from dateutil.relativedelta import relativedelta

from contract_tracker.models import (
    Contract,
    ONE_TIME,
    MONTHLY,
    YEARLY,
    UNKNOWN_VENDOR,
    UNCATEGORIZED,
)

logger = logging.getLogger(__name__)

# How yearly payments are spread over time
LUMP_SUM = 'lump_sum'
PRORATE = 'prorate'
YEARLY_POLICIES = (LUMP_SUM, PRORATE)

DEFAULT_TOP_CONTRACTS = 5

ZERO = Decimal('0')
CENT = Decimal('0.01')

MONTH_KEY_FORMAT = '%Y-%m'
MONTH_LABEL_FORMAT = '%b %y'
DISPLAY_MONTH_FORMAT = '%b %Y'


class ContractRepository(Protocol):
    """Anything that can return the full contract collection."""

    def list_all(self) -> List[Contract]:
        ...


@dataclass(frozen=True)
class AnalysisInterval:
    """Closed [start, end] range the range KPIs are computed over."""
    start: datetime
    end: datetime

    @property
    def display(self) -> str:
        return f"{self.start.strftime(DISPLAY_MONTH_FORMAT)} - {self.end.strftime(DISPLAY_MONTH_FORMAT)}"


# ============================================
# DATE HELPERS
# ============================================

def _at_midnight(day: date) -> datetime:
    return datetime.combine(day, time.min)


def _parse_query_date(value: Optional[str], name: str) -> Optional[datetime]:
    """Parse a YYYY-MM-DD query value as local midnight."""
    if value is None or not str(value).strip():
        return None
    try:
        return _at_midnight(date.fromisoformat(str(value).strip()))
    except ValueError:
        logger.warning(f"Ignoring malformed '{name}' date: {value!r}")
        return None


def month_start(moment) -> date:
    return date(moment.year, moment.month, 1)


def calendar_month_difference(later, earlier) -> int:
    """Number of month boundaries between two dates, ignoring the day of month."""
    return (later.year - earlier.year) * 12 + (later.month - earlier.month)


def round_currency(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


# ============================================
# INTERVAL RESOLVER
# ============================================

def resolve_interval(start: Optional[str] = None, end: Optional[str] = None,
                     now: Optional[datetime] = None) -> AnalysisInterval:
    """
    Turn optional start/end query values into an analysis interval.

    ``end`` defaults to the current instant and ``start`` to January 1 of the
    current year. An inverted range is returned as given.
    """
    now = now or datetime.now()
    resolved_start = _parse_query_date(start, 'start') or datetime(now.year, 1, 1)
    resolved_end = _parse_query_date(end, 'end') or now
    return AnalysisInterval(start=resolved_start, end=resolved_end)


# ============================================
# ACTIVITY FILTER
# ============================================

def is_currently_active(contract: Contract, today: date) -> bool:
    """Started on or before today and not yet ended."""
    if contract.start_date is None:
        return False
    if contract.start_date > today:
        return False
    return contract.end_date is None or contract.end_date >= today


def overlaps_interval(contract: Contract, interval: AnalysisInterval) -> bool:
    """Contract span and interval share at least one day."""
    if contract.start_date is None:
        return False
    return (_at_midnight(contract.start_date) <= interval.end
            and _at_midnight(contract.effective_end_date) >= interval.start)


# ============================================
# SPEND ALLOCATOR
# ============================================

def monthly_cost(contract: Contract, yearly_policy: str = LUMP_SUM) -> Optional[Decimal]:
    """Cost per month for contracts paid over time, None for lump sums."""
    if contract.payment_terms == MONTHLY:
        return contract.value
    if contract.payment_terms == YEARLY and yearly_policy == PRORATE:
        return contract.value / 12
    return None


def allocate_spend(contract: Contract, interval: AnalysisInterval,
                   yearly_policy: str = LUMP_SUM) -> Decimal:
    """Portion of the contract's value attributable to the interval."""
    if not contract.contract_value or contract.start_date is None:
        return ZERO

    start = _at_midnight(contract.start_date)
    per_month = monthly_cost(contract, yearly_policy)

    if per_month is None:
        # Recognized once, on the start date
        if interval.start <= start <= interval.end:
            return contract.value
        return ZERO

    overlap_start = max(start, interval.start)
    overlap_end = min(_at_midnight(contract.effective_end_date), interval.end)
    if overlap_start >= overlap_end:
        return ZERO

    # Partial months count as whole months
    months = calendar_month_difference(overlap_end, overlap_start) + 1
    return round_currency(per_month * months)


# ============================================
# AGGREGATOR
# ============================================

def rank_totals(totals: Dict[str, Decimal]) -> List[Dict[str, Any]]:
    """Sort keyed totals descending; ties keep first-seen order."""
    ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    return [{'name': name, 'total': round_currency(total)} for name, total in ranked]


def month_range(first: date, last: date) -> List[date]:
    """First day of every calendar month from first through last, inclusive."""
    first = month_start(first)
    count = calendar_month_difference(last, first) + 1
    # Offsets from the first month; never steps beyond the last one
    return [first + relativedelta(months=offset) for offset in range(max(count, 0))]


def init_month_buckets(interval: AnalysisInterval) -> Tuple[List[str], Dict[str, Decimal]]:
    """One zeroed bucket per calendar month from the interval's start month to its end month."""
    labels = []
    buckets = {}
    for current in month_range(interval.start, interval.end):
        labels.append(current.strftime(MONTH_LABEL_FORMAT))
        buckets[current.strftime(MONTH_KEY_FORMAT)] = ZERO
    return labels, buckets


def spend_trend(contracts: Iterable[Contract], interval: AnalysisInterval,
                yearly_policy: str = LUMP_SUM) -> Dict[str, List]:
    """Month-bucketed spend across the interval."""
    labels, buckets = init_month_buckets(interval)
    last_month = month_start(interval.end)

    for contract in contracts:
        if not contract.contract_value or contract.start_date is None:
            continue

        per_month = monthly_cost(contract, yearly_policy)
        if per_month is None:
            key = contract.start_date.strftime(MONTH_KEY_FORMAT)
            if key in buckets:
                buckets[key] += contract.value
            continue

        first = max(month_start(contract.start_date), month_start(interval.start))
        until = min(contract.effective_end_date, last_month)
        for current in month_range(first, until):
            key = current.strftime(MONTH_KEY_FORMAT)
            if key in buckets:
                buckets[key] += per_month

    return {
        'labels': labels,
        'data': [round_currency(total) for total in buckets.values()],
    }


def top_contracts(contracts: Iterable[Contract], limit: int = DEFAULT_TOP_CONTRACTS) -> List[Contract]:
    """Largest contracts by face value; ties keep collection order."""
    return sorted(contracts, key=lambda c: c.value, reverse=True)[:limit]


def distinct_values(contracts: Iterable[Contract], attribute: str) -> List[str]:
    return sorted({getattr(c, attribute) for c in contracts if getattr(c, attribute)})


# ============================================
# KPI ASSEMBLER
# ============================================

@dataclass
class AnalysisResult:
    """Everything the analysis page renders."""
    display_interval: str = ''
    total_active_contract_value: Decimal = ZERO
    monthly_recurring_cost: Decimal = ZERO
    total_annualized_spend: Decimal = ZERO
    one_time_contracts_value_ytd: Decimal = ZERO
    total_spend_in_range: Decimal = ZERO
    spend_by_vendor: List[Dict[str, Any]] = field(default_factory=list)
    spend_by_type: List[Dict[str, Any]] = field(default_factory=list)
    spend_trend: Dict[str, List] = field(default_factory=lambda: {'labels': [], 'data': []})
    top_contracts: List[Contract] = field(default_factory=list)
    all_types: List[str] = field(default_factory=list)
    all_vendors: List[str] = field(default_factory=list)

    @classmethod
    def empty(cls, interval: Optional[AnalysisInterval] = None) -> 'AnalysisResult':
        """Zero-valued result returned when contracts cannot be loaded."""
        return cls(display_interval=interval.display if interval else '')

    def to_dict(self) -> Dict[str, Any]:
        """Presentation payload with camelCase keys and float amounts."""
        return {
            'displayInterval': self.display_interval,
            'totalActiveContractValue': float(self.total_active_contract_value),
            'monthlyRecurringCost': float(self.monthly_recurring_cost),
            'totalAnnualizedSpend': float(self.total_annualized_spend),
            'oneTimeContractsValueYTD': float(self.one_time_contracts_value_ytd),
            'totalSpendInRange': float(self.total_spend_in_range),
            'spendByVendor': [{'name': r['name'], 'total': float(r['total'])} for r in self.spend_by_vendor],
            'spendByType': [{'name': r['name'], 'total': float(r['total'])} for r in self.spend_by_type],
            'spendTrend': {
                'labels': list(self.spend_trend['labels']),
                'data': [float(v) for v in self.spend_trend['data']],
            },
            'top5Contracts': [c.to_dict() for c in self.top_contracts],
            'allTypes': list(self.all_types),
            'allVendors': list(self.all_vendors),
        }


class SpendAnalysisEngine:
    """Computes snapshot and range KPIs for a contract collection."""

    def __init__(self, yearly_policy: str = LUMP_SUM, top_n: int = DEFAULT_TOP_CONTRACTS):
        if yearly_policy not in YEARLY_POLICIES:
            raise ValueError(f"Unknown yearly payment policy: {yearly_policy}")
        self.yearly_policy = yearly_policy
        self.top_n = top_n

    def snapshot_kpis(self, contracts: List[Contract], today: date) -> Dict[str, Decimal]:
        """Figures for currently-active commitments, independent of any date range."""
        active = [c for c in contracts if is_currently_active(c, today)]

        total_active = sum((c.value for c in active), ZERO)
        monthly_recurring = sum((c.value for c in active if c.payment_terms == MONTHLY), ZERO)
        annualized = sum((c.value * 12 for c in active if c.payment_terms == MONTHLY), ZERO)
        annualized += sum((c.value for c in active if c.payment_terms == YEARLY), ZERO)
        one_time_ytd = sum(
            (c.value for c in contracts
             if c.payment_terms == ONE_TIME and c.start_date and c.start_date.year == today.year),
            ZERO,
        )

        return {
            'total_active_contract_value': round_currency(total_active),
            'monthly_recurring_cost': round_currency(monthly_recurring),
            'total_annualized_spend': round_currency(annualized),
            'one_time_contracts_value_ytd': round_currency(one_time_ytd),
        }

    def range_kpis(self, contracts: List[Contract], interval: AnalysisInterval) -> Dict[str, Any]:
        """Spend allocated to the interval, folded by vendor, type and month."""
        in_range = [c for c in contracts if overlaps_interval(c, interval)]

        vendor_spend = {}
        type_spend = {}
        total = ZERO
        for contract in in_range:
            spend = allocate_spend(contract, interval, self.yearly_policy)
            if spend <= 0:
                continue
            vendor = contract.vendor_name or UNKNOWN_VENDOR
            contract_type = contract.contract_type or UNCATEGORIZED
            vendor_spend[vendor] = vendor_spend.get(vendor, ZERO) + spend
            type_spend[contract_type] = type_spend.get(contract_type, ZERO) + spend
            total += spend

        return {
            'total_spend_in_range': round_currency(total),
            'spend_by_vendor': rank_totals(vendor_spend),
            'spend_by_type': rank_totals(type_spend),
            'spend_trend': spend_trend(in_range, interval, self.yearly_policy),
            'top_contracts': top_contracts(in_range, self.top_n),
        }

    def analyze(self, contracts: List[Contract], interval: AnalysisInterval, today: date) -> AnalysisResult:
        contracts = list(contracts)
        return AnalysisResult(
            display_interval=interval.display,
            all_types=distinct_values(contracts, 'contract_type'),
            all_vendors=distinct_values(contracts, 'vendor_name'),
            **self.snapshot_kpis(contracts, today),
            **self.range_kpis(contracts, interval),
        )


def load_analysis(repository: ContractRepository, start: Optional[str] = None, end: Optional[str] = None,
                  now: Optional[datetime] = None,
                  engine: Optional[SpendAnalysisEngine] = None) -> AnalysisResult:
    """Fetch all contracts and compute the analysis page KPIs. Never raises on store failure."""
    now = now or datetime.now()
    engine = engine or SpendAnalysisEngine()
    interval = resolve_interval(start, end, now=now)

    try:
        contracts = repository.list_all()
    except Exception as e:
        logger.error(f"Error fetching contracts for analysis: {e}")
        return AnalysisResult.empty(interval)

    logger.info(f"Analyzing {len(contracts)} contracts for {interval.display}")
    return engine.analyze(contracts, interval, now.date())
