"""Tests for contract_tracker/models.py: record parsing and write validation."""

from datetime import date
from decimal import Decimal

import pytest

from contract_tracker.models import (
    FAR_FUTURE,
    Contract,
    ContractValidationError,
    display_value,
    parse_amount,
    parse_date,
    validate_contract_payload,
)


def _form(**overrides):
    form = {
        "contract_name": "Office Lease",
        "vendor_name": "Main Street Properties",
        "contract_type": "Facilities",
        "start_date": "2024-01-01",
        "end_date_type": "specific",
        "end_date": "2024-12-31",
        "payment_terms": "monthly",
        "contract_value": "4500",
        "notice_period_days": "60",
    }
    form.update(overrides)
    return form


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


class TestParsing:
    def test_parse_date_from_string(self):
        assert parse_date("2024-03-05") == date(2024, 3, 5)

    def test_parse_date_missing(self):
        assert parse_date(None) is None
        assert parse_date("") is None
        assert parse_date(float("nan")) is None

    def test_parse_date_garbage(self):
        assert parse_date("yesterday") is None

    def test_parse_amount_keeps_printed_digits(self):
        assert parse_amount(0.1) == Decimal("0.1")
        assert parse_amount("1234.50") == Decimal("1234.50")

    def test_parse_amount_rejects_non_finite(self):
        assert parse_amount(float("nan")) is None
        assert parse_amount(float("inf")) is None
        assert parse_amount("abc") is None


class TestContract:
    def test_from_record(self):
        contract = Contract.from_record({
            "id": 7,
            "contract_name": " CRM ",
            "vendor_name": "",
            "start_date": "2024-02-01",
            "end_date": None,
            "payment_terms": "yearly",
            "contract_value": 1200.0,
            "notice_period_days": None,
        })
        assert contract.id == 7
        assert contract.contract_name == "CRM"
        assert contract.vendor_name is None
        assert contract.start_date == date(2024, 2, 1)
        assert contract.contract_value == Decimal("1200.0")
        assert contract.notice_period_days == 30

    def test_effective_end_date(self):
        assert Contract(start_date=date(2024, 1, 1)).effective_end_date == FAR_FUTURE
        assert Contract(end_date=date(2024, 5, 1)).effective_end_date == date(2024, 5, 1)

    def test_value_defaults_to_zero(self):
        assert Contract().value == 0

    def test_to_dict_is_json_friendly(self):
        data = Contract(id=1, start_date=date(2024, 1, 1), contract_value=Decimal("99.5")).to_dict()
        assert data["start_date"] == "2024-01-01"
        assert data["end_date"] is None
        assert data["contract_value"] == 99.5

    def test_display_value(self):
        assert display_value(None) == "N/A"
        assert display_value("SW-1") == "SW-1"


# ---------------------------------------------------------------------------
# validate_contract_payload
# ---------------------------------------------------------------------------


class TestValidateContractPayload:
    def test_specific_end_date(self):
        data = validate_contract_payload(_form())
        assert data["end_date"] == "2024-12-31"
        assert data["renewal_type"] is None
        assert data["contract_value"] == 4500.0
        assert data["notice_period_days"] == 60

    def test_auto_renewing_clears_end_date(self):
        data = validate_contract_payload(_form(end_date_type="yearly"))
        assert data["end_date"] is None
        assert data["renewal_type"] == "yearly"

    def test_name_required(self):
        with pytest.raises(ContractValidationError, match="Contract Name"):
            validate_contract_payload(_form(contract_name="   "))

    def test_start_date_required(self):
        with pytest.raises(ContractValidationError, match="Start Date"):
            validate_contract_payload(_form(start_date=""))

    def test_end_date_required_when_not_renewing(self):
        with pytest.raises(ContractValidationError, match="Does Not Renew"):
            validate_contract_payload(_form(end_date=""))

    def test_end_before_start(self):
        with pytest.raises(ContractValidationError, match="before the Start Date"):
            validate_contract_payload(_form(end_date="2023-12-31"))

    def test_edit_form_takes_fields_as_given(self):
        form = _form(renewal_type="monthly", end_date="")
        del form["end_date_type"]
        data = validate_contract_payload(form)
        assert data["end_date"] is None
        assert data["renewal_type"] == "monthly"

    def test_unknown_payment_terms(self):
        with pytest.raises(ContractValidationError, match="payment terms"):
            validate_contract_payload(_form(payment_terms="weekly"))

    def test_negative_value(self):
        with pytest.raises(ContractValidationError, match="non-negative"):
            validate_contract_payload(_form(contract_value="-5"))

    def test_bad_notice_period(self):
        with pytest.raises(ContractValidationError, match="Notice Period"):
            validate_contract_payload(_form(notice_period_days="soon"))

    def test_optional_fields_default(self):
        data = validate_contract_payload(_form(contract_value="", notice_period_days=""))
        assert data["contract_value"] is None
        assert data["notice_period_days"] == 30

    def test_file_path_only_when_given(self):
        assert "file_path" not in validate_contract_payload(_form())
        assert validate_contract_payload(_form(), file_path="123-a.pdf")["file_path"] == "123-a.pdf"

    def test_error_carries_message_and_details(self):
        with pytest.raises(ContractValidationError) as exc_info:
            validate_contract_payload(_form(contract_name=""))
        assert exc_info.value.message == "Validation Error"
        assert "required" in exc_info.value.details
