from __future__ import annotations

import json
from pathlib import Path

import pytest

from paylink.errors import CollaboratorFetchError
from paylink.storage.document_store import JsonDocumentSource, OutboxSender


class DescribeJsonDocumentSource:
    def it_should_read_bare_lists(self, tmp_path: Path):
        (tmp_path / "paymentin.json").write_text(json.dumps([{"id": "p1"}]), encoding="utf-8")

        assert JsonDocumentSource(tmp_path).fetch_payments() == [{"id": "p1"}]

    def it_should_read_api_envelopes(self, tmp_path: Path):
        (tmp_path / "invoiceout.json").write_text(
            json.dumps({"meta": {"size": 1}, "rows": [{"id": "i1"}]}), encoding="utf-8"
        )

        rows = JsonDocumentSource(tmp_path).fetch_unpaid_candidates(expand=["agent"])

        assert rows == [{"id": "i1"}]

    def it_should_raise_for_missing_file(self, tmp_path: Path):
        with pytest.raises(CollaboratorFetchError):
            JsonDocumentSource(tmp_path).fetch_payments()

    def it_should_raise_for_invalid_json(self, tmp_path: Path):
        (tmp_path / "paymentin.json").write_text("{not json", encoding="utf-8")
        with pytest.raises(CollaboratorFetchError):
            JsonDocumentSource(tmp_path).fetch_payments()

    def it_should_raise_when_rows_are_not_a_list(self, tmp_path: Path):
        (tmp_path / "paymentin.json").write_text(json.dumps({"rows": "x"}), encoding="utf-8")
        with pytest.raises(CollaboratorFetchError):
            JsonDocumentSource(tmp_path).fetch_payments()


class DescribeOutboxSender:
    def it_should_write_records_as_list_per_entity(self, tmp_path: Path):
        outbox = tmp_path / "outbox"
        sender = OutboxSender(outbox)

        path = sender.send_entity("invoiceout", {"i1": {"meta": {"href": "h"}, "payedSum": 5}})

        assert path == outbox / "invoiceout.json"
        assert json.loads(path.read_text(encoding="utf-8")) == [
            {"meta": {"href": "h"}, "payedSum": 5}
        ]
        assert sender.written == {"invoiceout": path}

    def it_should_refuse_empty_batches(self, tmp_path: Path):
        with pytest.raises(ValueError):
            OutboxSender(tmp_path).send_entity("paymentin", {})
