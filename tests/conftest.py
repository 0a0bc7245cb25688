"""Shared form fixtures."""

from __future__ import annotations

import pytest

from campus_forms.definitions import FormDefinition, Section
from campus_forms.questions import (
    CheckboxQuestion,
    Conditional,
    MatrixQuestion,
    RadioQuestion,
    RatingQuestion,
    TextQuestion,
)


@pytest.fixture
def course_feedback() -> FormDefinition:
    """Two-section feedback form with a conditional follow-up and a matrix."""

    return FormDefinition(
        id="course-feedback",
        title="Course feedback",
        category="Academic",
        sections=(
            Section(
                id="section-1",
                title="Teaching",
                questions=(
                    RatingQuestion(id="q-overall", prompt="Overall rating", required=True),
                    RadioQuestion(
                        id="q-attend",
                        prompt="Did you attend the labs?",
                        options=("Yes", "No"),
                    ),
                    TextQuestion(
                        id="q-why",
                        prompt="Why not?",
                        required=True,
                        conditional=Conditional(depends_on="q-attend", equals="No"),
                    ),
                ),
            ),
            Section(
                id="section-2",
                title="Facilities",
                questions=(
                    MatrixQuestion(
                        id="q-fac",
                        prompt="Rate the facilities",
                        required=True,
                        rows=("Library", "Study Rooms"),
                    ),
                    CheckboxQuestion(
                        id="q-used",
                        prompt="Which did you use?",
                        options=("Gym", "Cafe", "Labs"),
                    ),
                ),
            ),
        ),
    )


@pytest.fixture
def two_required_sections() -> FormDefinition:
    return FormDefinition(
        id="two-sections",
        title="Two sections",
        sections=(
            Section(id="section-1", title="A", questions=(TextQuestion(id="q1", required=True),)),
            Section(id="section-2", title="B", questions=(TextQuestion(id="q2", required=True),)),
        ),
    )
