"""Oracle pipeline exceptions."""


class OracleError(Exception):
    """Base exception for the reading pipeline."""


class ClassificationFailure(OracleError):
    """The decider's answer could not be parsed into an intent."""


class GenerationFailure(OracleError):
    """A generation stage (context evaluation, interpretation, follow-up) failed."""
