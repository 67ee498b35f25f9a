"""
Contract Tracker - Contract List View
Search, filtering and sorting for the contract list page.
"""

import logging
from datetime import date
from typing import Dict, List, Any, Optional

import pandas as pd

from contract_tracker.contract_status import derive_status
from contract_tracker.models import Contract

logger = logging.getLogger(__name__)

SEARCH_COLUMNS = ['contract_name', 'vendor_name', 'contract_number']
SORTABLE_COLUMNS = [
    'contract_name', 'vendor_name', 'contract_type', 'contract_number',
    'start_date', 'end_date', 'contract_value', 'payment_terms', 'status',
]


def _distinct(df: pd.DataFrame, column: str) -> List[str]:
    if df.empty or column not in df.columns:
        return []
    values = df[column].dropna().astype(str).str.strip()
    return sorted(v for v in values.unique().tolist() if v)


def filter_contracts(df: pd.DataFrame, search: str = '', contract_type: str = '', vendor: str = '',
                     status: str = '', sort_by: str = '', descending: bool = False,
                     today: Optional[date] = None) -> Dict[str, Any]:
    """
    Apply list-view filters to the contracts DataFrame.

    Rows keep the store order (end date ascending, open-ended last) unless
    ``sort_by`` names a sortable column.
    """
    today = today or date.today()
    all_types = _distinct(df, 'contract_type')
    all_vendors = _distinct(df, 'vendor_name')

    df = df.copy()
    if not df.empty:
        df['status'] = df.apply(
            lambda row: derive_status(Contract.from_record(row.to_dict()), today).label, axis=1
        )

    search = (search or '').strip()
    if search and not df.empty:
        mask = pd.Series(False, index=df.index)
        for column in SEARCH_COLUMNS:
            mask |= df[column].fillna('').astype(str).str.contains(search, case=False, regex=False)
        df = df[mask]

    if contract_type and not df.empty:
        df = df[df['contract_type'] == contract_type]

    if vendor and not df.empty:
        df = df[df['vendor_name'] == vendor]

    if status and not df.empty:
        df = df[df['status'] == status]

    if sort_by and not df.empty:
        if sort_by in SORTABLE_COLUMNS:
            df = df.sort_values(sort_by, ascending=not descending, na_position='last', kind='stable')
        else:
            logger.warning(f"Ignoring unsupported sort column: {sort_by}")

    contracts = []
    for record in df.to_dict('records'):
        contract = Contract.from_record(record)
        row = contract.to_dict()
        row.update(derive_status(contract, today).to_dict())
        contracts.append(row)

    total_value = float(pd.to_numeric(df['contract_value'], errors='coerce').fillna(0).sum()) if not df.empty else 0.0

    return {
        'contracts': contracts,
        'count': len(contracts),
        'total_value': total_value,
        'allTypes': all_types,
        'allVendors': all_vendors,
    }
