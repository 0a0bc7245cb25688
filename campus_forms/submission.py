"""Assemble validated answers into a submission and hand it to a record store."""

from __future__ import annotations

import logging
import uuid
from copy import deepcopy
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from campus_forms.definitions import FormDefinition
from campus_forms.errors import (
    RequiredFieldMissing,
    SessionClosedError,
    SubmissionRejectedExternal,
)
from campus_forms.navigation import NavigationController
from campus_forms.questions import MatrixQuestion
from campus_forms.responses import ResponseStore, is_empty_answer
from campus_forms.schema_defaults import DEFAULT_SUBMIT_FAILURE_MESSAGE
from campus_forms.validation import ErrorMap, first_invalid_section
from campus_forms.visibility import is_visible

logger = logging.getLogger(__name__)

SUBMITTED = "submitted"
INVALID = "invalid"


@dataclass
class SubmissionResult:
    """Outcome of a submit attempt that reached a decision locally or remotely."""

    status: str
    submission_id: Optional[str] = None
    section_index: Optional[int] = None
    errors: ErrorMap = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == SUBMITTED


def assemble_payload(definition: FormDefinition, responses: ResponseStore) -> Dict[str, Any]:
    """Return the flattened answers for every visible, answered question.

    Every section is validated first, not only the one on screen, so a
    required answer skipped via the section tabs is still caught. Matrix
    answers become ``{row: column label}`` mappings under the question id.
    """

    invalid = first_invalid_section(definition, responses)
    if invalid is not None:
        raise RequiredFieldMissing(*invalid)

    payload: Dict[str, Any] = {}
    for _, question in definition.iter_questions():
        if not is_visible(question, responses, definition):
            continue
        if isinstance(question, MatrixQuestion):
            ratings: Dict[str, str] = {}
            for row in question.rows:
                label = question.column_label(responses.get(question.row_key(row)))
                if label is not None:
                    ratings[row] = label
            if ratings:
                payload[question.id] = ratings
            continue
        value = responses.get(question.id)
        if is_empty_answer(value):
            continue
        payload[question.id] = deepcopy(value)
    return payload


def build_submission_record(
    form_id: str,
    answers: Dict[str, Any],
    *,
    submitted_by: Optional[str] = None,
) -> Dict[str, Any]:
    """Wrap ``answers`` with an identifier and timestamp for storage."""

    record: Dict[str, Any] = {
        "id": uuid.uuid4().hex,
        "form_id": form_id,
        "submitted_at": datetime.now(timezone.utc).isoformat(),
        "answers": answers,
    }
    if submitted_by:
        record["submitted_by"] = submitted_by
    return record


def submit(
    controller: NavigationController,
    store: Any,
    *,
    submitted_by: Optional[str] = None,
) -> SubmissionResult:
    """Validate the whole form and persist it through ``store``.

    When validation fails the controller is moved to the first invalid section
    with its errors shown and nothing is sent. When ``store`` fails,
    :class:`SubmissionRejectedExternal` is raised and the answers are kept so
    the user can retry.
    """

    if controller.submitted:
        raise SessionClosedError(f"Form '{controller.definition.id}' was already submitted.")

    definition = controller.definition
    try:
        answers = assemble_payload(definition, controller.responses)
    except RequiredFieldMissing as exc:
        controller.show_errors(exc.section_index, exc.errors)
        logger.info(
            "Submission of form %s blocked by section %s: %s",
            definition.id,
            exc.section_index,
            sorted(exc.errors),
        )
        return SubmissionResult(status=INVALID, section_index=exc.section_index, errors=exc.errors)

    record = build_submission_record(definition.id, answers, submitted_by=submitted_by)
    try:
        store.insert_submission(record)
    except Exception as exc:  # pylint: disable=broad-except
        logger.warning("Record store rejected submission for form %s: %s", definition.id, exc)
        raise SubmissionRejectedExternal(DEFAULT_SUBMIT_FAILURE_MESSAGE, cause=exc) from exc

    logger.info("Stored submission %s for form %s", record["id"], definition.id)
    controller.responses.clear()
    controller.mark_submitted()
    return SubmissionResult(status=SUBMITTED, submission_id=record["id"])


def save_draft(
    controller: NavigationController,
    store: Any,
    *,
    saved_by: Optional[str] = None,
) -> Dict[str, Any]:
    """Persist the in-progress answers without validating them."""

    if controller.submitted:
        raise SessionClosedError(f"Form '{controller.definition.id}' was already submitted.")

    draft: Dict[str, Any] = {
        "form_id": controller.definition.id,
        "saved_at": datetime.now(timezone.utc).isoformat(),
        "section_index": controller.current_index,
        "answers": controller.responses.as_dict(),
    }
    if saved_by:
        draft["saved_by"] = saved_by
    try:
        store.save_draft(controller.definition.id, draft)
    except Exception as exc:  # pylint: disable=broad-except
        logger.warning("Record store rejected draft for form %s: %s", controller.definition.id, exc)
        raise SubmissionRejectedExternal(DEFAULT_SUBMIT_FAILURE_MESSAGE, cause=exc) from exc
    return draft


__all__ = [
    "INVALID",
    "SUBMITTED",
    "SubmissionResult",
    "assemble_payload",
    "build_submission_record",
    "save_draft",
    "submit",
]
