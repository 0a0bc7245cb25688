"""Helpers for working with form definition files on disk."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, Optional, Tuple

from campus_forms.definitions import FormDefinition, form_from_dict, form_to_dict
from campus_forms.errors import FormNotFoundError

logger = logging.getLogger(__name__)

FORM_FILENAME = "form.json"
SCHEMAS_ROOT = Path("form_schemas")


def discover_local_forms(root: Optional[Path] = None) -> Dict[str, Path]:
    """Return a mapping of ``form_id -> path`` for local form files."""

    base = root if root is not None else SCHEMAS_ROOT
    forms: Dict[str, Path] = {}
    if not base.exists():
        return forms
    for entry in sorted(base.iterdir()):
        if not entry.is_dir():
            continue
        form_path = entry / FORM_FILENAME
        if form_path.exists():
            forms[entry.name] = form_path
    return forms


def load_local_form(form_id: str, root: Optional[Path] = None) -> FormDefinition:
    """Load a single form definition by identifier."""

    base = root if root is not None else SCHEMAS_ROOT
    path = base / form_id / FORM_FILENAME
    if not path.exists():
        raise FormNotFoundError(form_id)
    with path.open("r", encoding="utf-8") as handle:
        payload = json.load(handle)
    return form_from_dict(payload, form_id=form_id)


def load_local_forms(
    root: Optional[Path] = None,
) -> Tuple[Dict[str, FormDefinition], Dict[str, str]]:
    """Load every local form.

    Returns the parsed forms and, separately, the files that could not be
    read together with the reason.
    """

    forms: Dict[str, FormDefinition] = {}
    problems: Dict[str, str] = {}
    for form_id, path in discover_local_forms(root).items():
        try:
            with path.open("r", encoding="utf-8") as handle:
                payload = json.load(handle)
            forms[form_id] = form_from_dict(payload, form_id=form_id)
        except (OSError, json.JSONDecodeError, ValueError) as exc:
            logger.warning("Skipping form file %s: %s", path, exc)
            problems[form_id] = str(exc)
    return forms, problems


def ensure_form_directory(form_id: str, root: Optional[Path] = None) -> Path:
    """Ensure the directory for ``form_id`` exists and return it."""

    base = root if root is not None else SCHEMAS_ROOT
    target_dir = base / form_id
    target_dir.mkdir(parents=True, exist_ok=True)
    return target_dir


def save_local_form(form: FormDefinition, root: Optional[Path] = None) -> Path:
    """Write ``form`` to its JSON file and return the path."""

    path = ensure_form_directory(form.id, root) / FORM_FILENAME
    with path.open("w", encoding="utf-8") as handle:
        json.dump(form_to_dict(form), handle, indent=2, ensure_ascii=False)
        handle.write("\n")
    logger.info("Saved form %s to %s", form.id, path)
    return path


__all__ = [
    "FORM_FILENAME",
    "SCHEMAS_ROOT",
    "discover_local_forms",
    "ensure_form_directory",
    "load_local_form",
    "load_local_forms",
    "save_local_form",
]
