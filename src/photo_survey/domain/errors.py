"""Error types shared across the survey."""


class SurveyValidationError(ValueError):
    """Input rejected before any remote call was made."""


class RemoteCallError(RuntimeError):
    """A Supabase call failed; the message is the provider's own."""


class InvalidTransitionError(RuntimeError):
    """Operation is not allowed in the session's current state."""
