"""
Error kinds raised by the gradation engine and the storage layer.

All derive from ValueError so callers that only care about "bad input"
can catch that. Zero total weight is not an error: see GradationResult.
"""


class QAError(ValueError):
    """Base class for precast QA errors."""


class InvalidWeight(QAError):
    """Weight is negative, non-numeric, non-finite, or washed weight exceeds total."""

    def __init__(self, message: str, sieve: str = None, value=None):
        super().__init__(message)
        self.sieve = sieve
        self.value = value


class MissingAggregateSpecification(QAError):
    """No aggregate specification registered under the requested name."""

    def __init__(self, name: str, available: list = None):
        self.name = name
        self.available = available or []
        message = f"No aggregate specification named: {name}."
        if self.available:
            message += f" Available: {self.available}"
        super().__init__(message)


class IncompatibleEnvelopeLength(QAError):
    """Envelope and sieve result sequences are not index-aligned."""

    def __init__(self, results_length: int, envelope_length: int):
        self.results_length = results_length
        self.envelope_length = envelope_length
        super().__init__(
            f"Envelope has {envelope_length} entries but {results_length} sieve results were given"
        )


class TestRecordNotFound(QAError):
    """No stored gradation test under the requested id."""

    __test__ = False

    def __init__(self, test_id: str):
        self.test_id = test_id
        super().__init__(f"Test not found: {test_id}")
