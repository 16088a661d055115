# src/bffeval/errors.py
"""Error types raised while evaluating a .bff document."""


class EvaluationError(Exception):
    """The content being evaluated is invalid."""

    is_internal = False

    def __init__(self, range, message):
        super().__init__(message)
        self.range = range
        self.message = message

    def __repr__(self):
        return f"{self.__class__.__name__}({self.message!r}, range={self.range})"


class InternalEvaluationError(EvaluationError):
    """The evaluator (or the parser feeding it) has a bug.

    Raised for node kinds the evaluator does not recognise and for broken
    evaluator invariants, never for problems in the evaluated content.
    """

    is_internal = True


class DataAndMaybeError:
    """Result of an evaluation pass: the (possibly partial) data plus at most one error."""

    def __init__(self, data, error=None):
        self.data = data
        self.error = error

    @property
    def ok(self):
        return self.error is None

    def __repr__(self):
        return f"DataAndMaybeError(data={self.data!r}, error={self.error!r})"
