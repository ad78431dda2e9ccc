from __future__ import annotations

"""
File-based collaborators for offline runs.

- JsonDocumentSource reads exported API rows from data/paymentin.json and
  data/invoiceout.json. A file may hold a bare list or an API envelope {"rows": [...]}.
- OutboxSender writes each update set to outbox/<entity_type>.json as a list,
  the same payload the API client would POST.
"""

import json
from pathlib import Path
from typing import Dict, Iterable, List

from paylink.errors import CollaboratorFetchError, SendError


def _read_rows(path: Path) -> List[dict]:
    if not path.exists():
        raise CollaboratorFetchError(f"Document file not found: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise CollaboratorFetchError(f"Cannot read {path}: {e}") from e
    if isinstance(data, dict):
        data = data.get("rows")
    if not isinstance(data, list):
        raise CollaboratorFetchError(f"{path}: expected a list of rows")
    return data


class JsonDocumentSource:
    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)

    @property
    def payments_path(self) -> Path:
        return self.data_dir / "paymentin.json"

    @property
    def invoices_path(self) -> Path:
        return self.data_dir / "invoiceout.json"

    def fetch_payments(self) -> List[dict]:
        return _read_rows(self.payments_path)

    def fetch_unpaid_candidates(self, expand: Iterable[str] = ()) -> List[dict]:
        # Exports already carry expanded refs
        return _read_rows(self.invoices_path)


class OutboxSender:
    def __init__(self, outbox_dir: Path):
        self.outbox_dir = Path(outbox_dir)
        self.written: Dict[str, Path] = {}

    def send_entity(self, entity_type: str, records: Dict[str, dict]) -> Path:
        if not records:
            raise ValueError(f"Refusing to write an empty {entity_type} batch")
        path = self.outbox_dir / f"{entity_type}.json"
        try:
            self.outbox_dir.mkdir(parents=True, exist_ok=True)
            path.write_text(
                json.dumps(list(records.values()), ensure_ascii=False, indent=2),
                encoding="utf-8",
            )
        except OSError as e:
            raise SendError(entity_type, str(e)) from e
        self.written[entity_type] = path
        return path


__all__ = ["JsonDocumentSource", "OutboxSender"]
