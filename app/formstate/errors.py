from __future__ import annotations


class ValidationError(Exception):
    """
    Raised while validating a submission; carries messages keyed by field path.

    Never escapes `validate()`: it is always turned into an error Submission.
    """

    def __init__(self, field_errors: dict[str, list[str]]):
        super().__init__(", ".join(sorted(field_errors)) or "invalid submission")
        self.field_errors = field_errors
