"""Record store configuration read from Streamlit secrets and the environment."""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Dict, Optional, Union

from campus_forms.record_store import LocalRecordStore, RecordStoreBackend

DEFAULT_LOCAL_ROOT = Path(".")


def _section(secrets: Mapping, name: str) -> Dict[str, Any]:
    """Return a mapping stored under ``name`` in ``secrets``."""

    value = secrets.get(name, {})
    if isinstance(value, Mapping):
        return dict(value)
    return {}


def record_store_settings(
    secrets: Optional[Mapping] = None,
    environ: Optional[Mapping] = None,
) -> Dict[str, Any]:
    """Return record store configuration in a normalised structure.

    The ``record_store`` secrets section wins, then flat ``record_store_*``
    secrets, then the ``SUPABASE_URL`` / ``SUPABASE_SERVICE_KEY`` environment
    variables. An empty dict means no remote store is configured.
    """

    secrets = secrets if secrets is not None else {}
    environ = environ if environ is not None else os.environ

    section = _section(secrets, "record_store")
    url = section.get("url") or secrets.get("record_store_url") or environ.get("SUPABASE_URL")
    key = section.get("key") or secrets.get("record_store_key") or environ.get("SUPABASE_SERVICE_KEY")
    if not (url and key):
        return {}

    settings: Dict[str, Any] = {"url": str(url), "key": str(key)}
    for table in ("forms_table", "submissions_table", "drafts_table"):
        value = section.get(table)
        if isinstance(value, str) and value.strip():
            settings[table] = value.strip()
    return settings


def build_record_store(
    settings: Mapping,
    local_root: Optional[Path] = None,
) -> Union[RecordStoreBackend, LocalRecordStore]:
    """Return the remote store when configured, otherwise the local one."""

    if settings.get("url") and settings.get("key"):
        return RecordStoreBackend(**dict(settings))
    return LocalRecordStore(local_root if local_root is not None else DEFAULT_LOCAL_ROOT)


__all__ = ["build_record_store", "record_store_settings"]
