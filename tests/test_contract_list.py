"""Tests for contract_tracker/contract_list.py: list view filters."""

from datetime import date

import pandas as pd

from contract_tracker.contract_list import filter_contracts

TODAY = date(2024, 6, 15)

COLUMNS = [
    "id", "contract_name", "vendor_name", "contract_type", "contract_subtype", "contract_number",
    "start_date", "end_date", "payment_terms", "contract_value", "renewal_type",
    "notice_period_days", "file_path",
]


def _df(rows):
    return pd.DataFrame([{c: row.get(c) for c in COLUMNS} for row in rows], columns=COLUMNS).astype(object)


def _rows():
    return [
        {"id": 1, "contract_name": "Office Lease", "vendor_name": "Main Street Properties",
         "contract_type": "Facilities", "contract_number": "FAC-001", "start_date": "2023-01-01",
         "end_date": "2024-07-01", "payment_terms": "monthly", "contract_value": 4500.0},
        {"id": 2, "contract_name": "CRM Subscription", "vendor_name": "CloudCo",
         "contract_type": "Software", "contract_number": "SW-014", "start_date": "2024-02-01",
         "payment_terms": "yearly", "contract_value": 18000.0, "renewal_type": "yearly"},
        {"id": 3, "contract_name": "Security Audit", "vendor_name": "Sentinel",
         "contract_type": "Consulting", "contract_number": None, "start_date": "2024-03-10",
         "end_date": "2024-03-20", "payment_terms": "one_time", "contract_value": 12500.0},
        {"id": 4, "contract_name": "Cloud Backup", "vendor_name": "CloudCo",
         "contract_type": "Software", "contract_number": "SW-030", "start_date": None,
         "payment_terms": "monthly", "contract_value": None},
    ]


class TestFilterContracts:
    def test_no_filters_keeps_store_order(self):
        result = filter_contracts(_df(_rows()), today=TODAY)
        assert [c["id"] for c in result["contracts"]] == [1, 2, 3, 4]
        assert result["count"] == 4
        assert result["total_value"] == 35000.0

    def test_filter_lists(self):
        result = filter_contracts(_df(_rows()), today=TODAY)
        assert result["allTypes"] == ["Consulting", "Facilities", "Software"]
        assert result["allVendors"] == ["CloudCo", "Main Street Properties", "Sentinel"]

    def test_search_is_case_insensitive_across_columns(self):
        result = filter_contracts(_df(_rows()), search="cloud", today=TODAY)
        assert [c["id"] for c in result["contracts"]] == [2, 4]
        result = filter_contracts(_df(_rows()), search="fac-001", today=TODAY)
        assert [c["id"] for c in result["contracts"]] == [1]

    def test_search_is_literal(self):
        result = filter_contracts(_df(_rows()), search="SW-0[13]", today=TODAY)
        assert result["contracts"] == []

    def test_type_and_vendor_filters(self):
        result = filter_contracts(_df(_rows()), contract_type="Software", vendor="CloudCo", today=TODAY)
        assert [c["id"] for c in result["contracts"]] == [2, 4]

    def test_status_filter(self):
        result = filter_contracts(_df(_rows()), status="Expired", today=TODAY)
        assert [c["id"] for c in result["contracts"]] == [3]

    def test_rows_carry_status(self):
        rows = {c["id"]: c for c in filter_contracts(_df(_rows()), today=TODAY)["contracts"]}
        assert rows[1]["status"] == "Expiring soon"
        assert rows[2]["status"] == "Auto-renews"
        assert rows[4]["status"] == "Draft"

    def test_sort_by_value_descending_missing_last(self):
        result = filter_contracts(_df(_rows()), sort_by="contract_value", descending=True, today=TODAY)
        assert [c["id"] for c in result["contracts"]] == [2, 3, 1, 4]

    def test_unknown_sort_column_ignored(self):
        result = filter_contracts(_df(_rows()), sort_by="password", today=TODAY)
        assert [c["id"] for c in result["contracts"]] == [1, 2, 3, 4]

    def test_empty_frame(self):
        result = filter_contracts(_df([]), search="x", status="Active", today=TODAY)
        assert result == {"contracts": [], "count": 0, "total_value": 0,
                          "allTypes": [], "allVendors": []}
        assert isinstance(result["total_value"], float)

    def test_no_matches_total_is_float(self):
        result = filter_contracts(_df(_rows()), search="no such contract", today=TODAY)
        assert result["count"] == 0
        assert result["total_value"] == 0.0
        assert isinstance(result["total_value"], float)
