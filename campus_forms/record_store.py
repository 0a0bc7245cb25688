"""Persistence collaborators: a hosted REST record store and a local one."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List

import requests

from campus_forms.definitions import FormDefinition, form_from_dict
from campus_forms.errors import FormNotFoundError
from campus_forms.form_store import load_local_form

logger = logging.getLogger(__name__)


@dataclass
class RecordStoreBackend:
    """Wrapper around the hosted backend's REST interface for forms data.

    Rows are addressed PostgREST style: ``/rest/v1/<table>?column=eq.value``.
    The form row keeps its sections in a JSON ``definition`` column.
    """

    url: str
    key: str
    forms_table: str = "forms"
    submissions_table: str = "form_responses"
    drafts_table: str = "form_drafts"
    timeout: int = 10

    def _headers(self) -> Dict[str, str]:
        """Build request headers for the REST API."""

        return {
            "apikey": self.key,
            "Authorization": f"Bearer {self.key}",
            "Accept": "application/json",
            "Content-Type": "application/json",
        }

    def _url(self, table: str) -> str:
        return f"{self.url.rstrip('/')}/rest/v1/{table}"

    def load_form(self, form_id: str) -> FormDefinition:
        """Fetch a form definition by identifier."""

        response = requests.get(
            self._url(self.forms_table),
            headers=self._headers(),
            params={"id": f"eq.{form_id}", "select": "*"},
            timeout=self.timeout,
        )
        response.raise_for_status()
        rows: List[Dict[str, Any]] = response.json()
        if not rows:
            raise FormNotFoundError(form_id)

        row = dict(rows[0])
        definition = row.pop("definition", None)
        if isinstance(definition, str):
            definition = json.loads(definition)
        if isinstance(definition, dict):
            row = {**row, **definition}
        return form_from_dict(row, form_id=form_id)

    def insert_submission(self, record: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a submission row and return the stored representation."""

        response = requests.post(
            self._url(self.submissions_table),
            headers={**self._headers(), "Prefer": "return=representation"},
            json=record,
            timeout=self.timeout,
        )
        response.raise_for_status()
        payload = response.json()
        if isinstance(payload, list):
            return payload[0] if payload else {}
        return payload

    def save_draft(self, form_id: str, draft: Dict[str, Any]) -> Dict[str, Any]:
        """Upsert the draft answers kept for ``form_id``."""

        response = requests.post(
            self._url(self.drafts_table),
            headers={**self._headers(), "Prefer": "resolution=merge-duplicates,return=representation"},
            params={"on_conflict": "form_id"},
            json={**draft, "form_id": form_id},
            timeout=self.timeout,
        )
        response.raise_for_status()
        payload = response.json()
        if isinstance(payload, list):
            return payload[0] if payload else {}
        return payload


class LocalRecordStore:
    """Record store backed by JSON files under ``root``.

    Forms live in ``root/form_schemas``, submissions in
    ``root/submissions/<form_id>/<id>.json`` and drafts in
    ``root/drafts/<form_id>.json``.
    """

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    @property
    def forms_root(self) -> Path:
        return self.root / "form_schemas"

    def load_form(self, form_id: str) -> FormDefinition:
        return load_local_form(form_id, self.forms_root)

    def _write(self, path: Path, payload: Dict[str, Any]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as handle:
            json.dump(payload, handle, indent=2, ensure_ascii=False)

    def insert_submission(self, record: Dict[str, Any]) -> Dict[str, Any]:
        path = self.root / "submissions" / str(record["form_id"]) / f"{record['id']}.json"
        self._write(path, record)
        logger.debug("Wrote submission %s", path)
        return record

    def save_draft(self, form_id: str, draft: Dict[str, Any]) -> Dict[str, Any]:
        payload = {**draft, "form_id": form_id}
        self._write(self.root / "drafts" / f"{form_id}.json", payload)
        return payload

    def load_draft(self, form_id: str) -> Dict[str, Any]:
        """Return the saved draft for ``form_id`` or an empty dict."""

        path = self.root / "drafts" / f"{form_id}.json"
        if not path.exists():
            return {}
        with path.open("r", encoding="utf-8") as handle:
            return json.load(handle)


__all__ = ["LocalRecordStore", "RecordStoreBackend"]
