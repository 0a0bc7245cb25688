"""Form engine for campus feedback forms and surveys."""

from .definitions import FormDefinition, Section, form_from_dict, form_to_dict  # noqa: F401
from .errors import (  # noqa: F401
    CannotDeleteLastSection,
    FormEngineError,
    RequiredFieldMissing,
    SubmissionRejectedExternal,
)
from .navigation import NavigationController  # noqa: F401
from .questions import (  # noqa: F401
    CheckboxQuestion,
    Conditional,
    MatrixQuestion,
    RadioQuestion,
    RatingQuestion,
    SelectQuestion,
    TextQuestion,
)
from .responses import ResponseStore  # noqa: F401
from .submission import assemble_payload, submit  # noqa: F401
from .validation import validate_form, validate_section  # noqa: F401
