"""Tests for Payment / Invoice / AttachmentAttribute parsing."""

from __future__ import annotations

from datetime import datetime

import pytest
from pydantic import ValidationError

from paylink.model.documents import AttachmentAttribute, Invoice, Payment

BASE = "https://api.moysklad.ru/api/remap/1.2/entity"


def _ref(kind: str, ident: str) -> dict:
    return {"meta": {"href": f"{BASE}/{kind}/{ident}", "type": kind}}


def _payment_row(**overrides) -> dict:
    row = {
        "id": "p-1",
        "meta": {"href": f"{BASE}/paymentin/p-1", "type": "paymentin"},
        "organization": _ref("organization", "org"),
        "agent": _ref("counterparty", "agent"),
        "organizationAccount": _ref("account", "acc"),
        "sum": 4048750,
        "paymentPurpose": "Оплата по сч/ф 1020 от 19.02.2025",
    }
    row.update(overrides)
    return row


def _invoice_row(**overrides) -> dict:
    row = {
        "id": "i-1",
        "meta": {"href": f"{BASE}/invoiceout/i-1", "type": "invoiceout"},
        "name": "1020",
        "organization": _ref("organization", "org"),
        "agent": _ref("counterparty", "agent"),
        "organizationAccount": _ref("account", "acc"),
        "sum": 4048750,
        "payedSum": 0,
        "moment": "2025-02-19 10:15:00.000",
    }
    row.update(overrides)
    return row


class DescribePayment:
    def it_should_extract_reference_hrefs(self):
        p = Payment.from_api_row(_payment_row())

        assert p.payment_id == "p-1"
        assert p.organization_href == f"{BASE}/organization/org"
        assert p.agent_href == f"{BASE}/counterparty/agent"
        assert p.account_href == f"{BASE}/account/acc"
        assert p.amount == 4048750
        assert p.is_eligible

    def it_should_be_ineligible_without_account(self):
        row = _payment_row()
        del row["organizationAccount"]

        p = Payment.from_api_row(row)

        assert p.account_href is None
        assert not p.is_eligible

    def it_should_be_ineligible_with_blank_purpose(self):
        p = Payment.from_api_row(_payment_row(paymentPurpose="   "))
        assert not p.is_eligible

    def it_should_be_ineligible_with_non_positive_amount(self):
        assert not Payment.from_api_row(_payment_row(sum=-500)).is_eligible
        assert not Payment.from_api_row(_payment_row(sum=0)).is_eligible

    def it_should_report_linked_when_operations_present(self):
        p = Payment.from_api_row(_payment_row(operations=[{"meta": {"href": "x"}}]))
        assert p.is_linked

    def it_should_reject_rows_without_id(self):
        row = _payment_row()
        del row["id"]
        with pytest.raises(KeyError):
            Payment.from_api_row(row)


class DescribeInvoice:
    def it_should_parse_api_moment_format(self):
        inv = Invoice.from_api_row(_invoice_row())

        assert inv.moment == datetime(2025, 2, 19, 10, 15)
        assert inv.number == "1020"
        assert inv.remaining == 4048750
        assert inv.is_unpaid

    def it_should_scale_payed_sum_into_minor_units(self):
        inv = Invoice.from_api_row(_invoice_row(sum=10000, payedSum=40.5), payed_sum_scale=100)

        assert inv.amount_paid == 4050
        assert inv.remaining == 5950

    def it_should_not_be_unpaid_when_fully_paid(self):
        inv = Invoice.from_api_row(_invoice_row(sum=500, payedSum=500))
        assert not inv.is_unpaid

    def it_should_raise_on_unparsable_moment(self):
        with pytest.raises(ValueError):
            Invoice.from_api_row(_invoice_row(moment="yesterday"))

    def it_should_raise_validation_error_on_bad_meta(self):
        with pytest.raises(ValidationError):
            Invoice.from_api_row(_invoice_row(meta="not-a-dict"))


class DescribeAttachmentAttribute:
    def it_should_set_value_true_and_keep_meta(self):
        attr = AttachmentAttribute(
            meta={"href": f"{BASE}/paymentin/metadata/attributes/a1", "type": "attributemetadata"},
            id="a1",
            name="Attached",
            value=False,
        )

        payload = attr.as_attached()

        assert payload["value"] is True
        assert payload["meta"]["href"].endswith("/a1")
        assert payload["id"] == "a1"
        assert attr.value is False
