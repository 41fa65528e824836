class GradeError(Exception):
    pass


class ValidationError(GradeError):
    """Input data problem: bad rank, tie-count or cohort values, or a malformed record."""


class ConfigurationError(ValidationError):
    """Unknown grade scale or display locale."""


class CalculationError(GradeError):
    """Unexpected failure while computing a grade from valid input."""


class AggregateError(GradeError):
    pass
