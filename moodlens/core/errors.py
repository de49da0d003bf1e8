"""
Error taxonomy for the mood engine.

Insufficient data is never an error: too few points for a trend or a
pattern yields a neutral result ('stable', False, 0.0) instead.
"""


# ============================================================================
# EXCEPTIONS
# ============================================================================

class InvalidInputError(ValueError):
    """Raised when the caller hands the engine something it cannot score."""
    pass


class UpstreamSummaryUnavailable(RuntimeError):
    """Raised when the generative-text collaborator times out or fails.

    Always caught by the insight composer, which falls back to templates.
    """
    pass
