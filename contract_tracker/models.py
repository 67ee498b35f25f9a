"""
Contract Tracker - Data Model
Contract value object, payment cadences, and validation of contract writes.
"""

import logging
import math
from dataclasses import dataclass, asdict
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Dict, Any, Optional

logger = logging.getLogger(__name__)

# Payment cadences
ONE_TIME = 'one_time'
MONTHLY = 'monthly'
YEARLY = 'yearly'
PAYMENT_TERMS = (ONE_TIME, MONTHLY, YEARLY)

# Renewal cadences
RENEWAL_TYPES = (MONTHLY, YEARLY)

# End date choices on the contract form
END_DATE_SPECIFIC = 'specific'
END_DATE_TYPES = (END_DATE_SPECIFIC, MONTHLY, YEARLY)

DEFAULT_NOTICE_PERIOD_DAYS = 30

# Open-ended contracts run until this date for overlap arithmetic
FAR_FUTURE = date(2999, 12, 31)

UNKNOWN_VENDOR = 'Unknown Vendor'
UNCATEGORIZED = 'Uncategorized'
NOT_AVAILABLE = 'N/A'

# Columns persisted for a contract, in table order
CONTRACT_FIELDS = [
    'contract_name',
    'vendor_name',
    'contract_type',
    'contract_subtype',
    'contract_number',
    'start_date',
    'end_date',
    'payment_terms',
    'contract_value',
    'renewal_type',
    'notice_period_days',
    'file_path',
]


class ContractValidationError(ValueError):
    """Raised when a contract payload fails validation."""

    def __init__(self, details: str, message: str = 'Validation Error'):
        super().__init__(details)
        self.message = message
        self.details = details


def _is_missing(value) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


def parse_date(value) -> Optional[date]:
    """Parse a stored date (date, datetime or 'YYYY-MM-DD' string) to a calendar date."""
    if _is_missing(value):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        logger.warning(f"Ignoring unparseable date: {value!r}")
        return None


def parse_amount(value) -> Optional[Decimal]:
    """Convert a stored amount to Decimal, going through str so floats keep their printed digits."""
    if _is_missing(value):
        return None
    if isinstance(value, Decimal):
        return value
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        logger.warning(f"Ignoring unparseable amount: {value!r}")
        return None
    if not amount.is_finite():
        return None
    return amount


def _clean_text(value) -> Optional[str]:
    if _is_missing(value):
        return None
    return str(value).strip()


@dataclass(frozen=True)
class Contract:
    """A stored contract. Read-only to the analysis code."""
    id: Optional[int] = None
    contract_name: Optional[str] = None
    vendor_name: Optional[str] = None
    contract_type: Optional[str] = None
    contract_subtype: Optional[str] = None
    contract_number: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    payment_terms: Optional[str] = None
    contract_value: Optional[Decimal] = None
    renewal_type: Optional[str] = None
    notice_period_days: int = DEFAULT_NOTICE_PERIOD_DAYS
    file_path: Optional[str] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> 'Contract':
        """Build a contract from a database row or DataFrame record."""
        notice = record.get('notice_period_days')
        contract_id = record.get('id')
        return cls(
            id=None if _is_missing(contract_id) else int(contract_id),
            contract_name=_clean_text(record.get('contract_name')),
            vendor_name=_clean_text(record.get('vendor_name')),
            contract_type=_clean_text(record.get('contract_type')),
            contract_subtype=_clean_text(record.get('contract_subtype')),
            contract_number=_clean_text(record.get('contract_number')),
            start_date=parse_date(record.get('start_date')),
            end_date=parse_date(record.get('end_date')),
            payment_terms=_clean_text(record.get('payment_terms')),
            contract_value=parse_amount(record.get('contract_value')),
            renewal_type=_clean_text(record.get('renewal_type')),
            notice_period_days=DEFAULT_NOTICE_PERIOD_DAYS if _is_missing(notice) else int(notice),
            file_path=_clean_text(record.get('file_path')),
        )

    @property
    def effective_end_date(self) -> date:
        return self.end_date or FAR_FUTURE

    @property
    def value(self) -> Decimal:
        """Contract value with absent treated as zero."""
        return self.contract_value or Decimal('0')

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly representation."""
        data = asdict(self)
        data['start_date'] = self.start_date.isoformat() if self.start_date else None
        data['end_date'] = self.end_date.isoformat() if self.end_date else None
        data['contract_value'] = float(self.contract_value) if self.contract_value is not None else None
        return data


def display_value(value) -> str:
    """Presentation default for absent descriptive fields."""
    return NOT_AVAILABLE if _is_missing(value) else str(value)


# ==================
# WRITE VALIDATION
# ==================

def validate_contract_payload(form: Dict[str, Any], file_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Validate a create/edit payload and return the column values to store.

    When the payload carries ``end_date_type`` (the create form), it decides
    between a fixed end date and an auto-renewing contract. Otherwise
    ``end_date`` and ``renewal_type`` are taken as given (the edit form).
    """
    contract_name = _clean_text(form.get('contract_name'))
    if not contract_name:
        raise ContractValidationError('Contract Name is a required field.')

    start_raw = _clean_text(form.get('start_date'))
    if not start_raw:
        raise ContractValidationError('Start Date is a required field.')
    start_date = _parse_form_date(start_raw, 'Start Date')

    end_raw = _clean_text(form.get('end_date'))
    end_date_type = _clean_text(form.get('end_date_type') or form.get('endDateType'))

    if end_date_type is not None:
        if end_date_type not in END_DATE_TYPES:
            raise ContractValidationError(f'Unknown end date type: {end_date_type}.')
        if end_date_type == END_DATE_SPECIFIC:
            if not end_raw:
                raise ContractValidationError(
                    'End Date is required when the contract is set to "Does Not Renew".'
                )
            end_date = _parse_form_date(end_raw, 'End Date')
            renewal_type = None
        else:
            end_date = None
            renewal_type = end_date_type
    else:
        end_date = _parse_form_date(end_raw, 'End Date') if end_raw else None
        renewal_type = _clean_text(form.get('renewal_type'))
        if renewal_type is not None and renewal_type not in RENEWAL_TYPES:
            raise ContractValidationError(f'Unknown renewal type: {renewal_type}.')

    if end_date and end_date < start_date:
        raise ContractValidationError('End Date cannot be before the Start Date.')

    payment_terms = _clean_text(form.get('payment_terms'))
    if payment_terms is not None and payment_terms not in PAYMENT_TERMS:
        raise ContractValidationError(f'Unknown payment terms: {payment_terms}.')

    contract_value = None
    if not _is_missing(form.get('contract_value')):
        contract_value = parse_amount(form.get('contract_value'))
        if contract_value is None or contract_value < 0:
            raise ContractValidationError('Contract Value must be a non-negative number.')

    notice_period_days = DEFAULT_NOTICE_PERIOD_DAYS
    if not _is_missing(form.get('notice_period_days')):
        try:
            notice_period_days = int(form.get('notice_period_days'))
        except (TypeError, ValueError):
            raise ContractValidationError('Notice Period must be a whole number of days.')
        if notice_period_days < 0:
            raise ContractValidationError('Notice Period must be a whole number of days.')

    data = {
        'contract_name': contract_name,
        'vendor_name': _clean_text(form.get('vendor_name')),
        'contract_type': _clean_text(form.get('contract_type')),
        'contract_subtype': _clean_text(form.get('contract_subtype')),
        'contract_number': _clean_text(form.get('contract_number')),
        'start_date': start_date.isoformat(),
        'end_date': end_date.isoformat() if end_date else None,
        'payment_terms': payment_terms,
        'contract_value': float(contract_value) if contract_value is not None else None,
        'renewal_type': renewal_type,
        'notice_period_days': notice_period_days,
    }
    if file_path is not None:
        data['file_path'] = file_path
    return data


def _parse_form_date(value: str, label: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ContractValidationError(f'{label} must be a date in YYYY-MM-DD format.')
