from __future__ import annotations

from datetime import datetime

import pytest

from paylink.matching.batch import INVOICE_ENTITY, PAYMENT_ENTITY, UpdateBatchBuilder
from paylink.model.documents import AttachmentAttribute, Invoice, Payment


@pytest.fixture
def attribute():
    return AttachmentAttribute(meta={"href": "https://x/attributes/a1"}, id="a1", name="Attached")


def _payment(pid: str, amount: int = 100) -> Payment:
    return Payment(
        payment_id=pid,
        meta={"href": f"https://x/paymentin/{pid}", "type": "paymentin"},
        account_href="https://x/account/acc",
        amount=amount,
        purpose="сч 1",
    )


def _invoice(iid: str = "i1") -> Invoice:
    return Invoice(
        invoice_id=iid,
        meta={"href": f"https://x/invoiceout/{iid}", "type": "invoiceout"},
        number="1",
        total_amount=1000,
        moment=datetime(2025, 1, 1),
    )


class DescribeUpdateBatchBuilder:
    def it_should_build_empty_batch(self, attribute):
        batch = UpdateBatchBuilder(attribute).build()

        assert batch.is_empty
        assert batch.payment_updates == {}
        assert batch.invoice_updates == {}
        assert batch.by_entity() == {}

    def it_should_link_payment_to_invoice_and_flag_attribute(self, attribute):
        builder = UpdateBatchBuilder(attribute)
        invoice = _invoice()

        builder.add_payment_update(_payment("p1"), invoice)
        record = builder.build().payment_updates["p1"]

        assert record["meta"]["href"] == "https://x/paymentin/p1"
        assert record["attributes"][0]["value"] is True
        assert record["attributes"][0]["meta"] == {"href": "https://x/attributes/a1"}
        assert record["operations"] == [{"meta": invoice.meta}]

    def it_should_keep_one_record_per_invoice_with_last_paid_amount(self, attribute):
        builder = UpdateBatchBuilder(attribute)
        invoice = _invoice()

        builder.add_invoice_update(invoice, 100)
        builder.add_invoice_update(invoice, 250)
        batch = builder.build()

        assert list(batch.invoice_updates) == ["i1"]
        assert batch.invoice_updates["i1"]["payedSum"] == 250

    def it_should_convert_paid_amount_back_to_source_units(self, attribute):
        builder = UpdateBatchBuilder(attribute, payed_sum_scale=100)

        builder.add_invoice_update(_invoice("a"), 4000)
        builder.add_invoice_update(_invoice("b"), 4050)
        batch = builder.build()

        assert batch.invoice_updates["a"]["payedSum"] == 40
        assert batch.invoice_updates["b"]["payedSum"] == 40.5

    def it_should_order_entities_payments_first(self, attribute):
        builder = UpdateBatchBuilder(attribute)
        invoice = _invoice()
        builder.add_invoice_update(invoice, 100)
        builder.add_payment_update(_payment("p1"), invoice)

        assert list(builder.build().by_entity()) == [PAYMENT_ENTITY, INVOICE_ENTITY]

    def it_should_return_snapshots_not_live_state(self, attribute):
        builder = UpdateBatchBuilder(attribute)
        first = builder.build()

        builder.add_payment_update(_payment("p1"), _invoice())

        assert first.payment_updates == {}
