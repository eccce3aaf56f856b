# core/errors.py


# ============================================================
# Domain failures, rendered as {"error": ...} by main.py
# ============================================================
class AppError(Exception):
    """Base class for failures that map onto a client-facing status code."""

    status_code = 500
    default_message = "An unexpected error occurred"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(AppError):
    status_code = 404
    default_message = "Resource not found"


class InvalidInputError(AppError):
    status_code = 400
    default_message = "Invalid input"


class ConflictError(AppError):
    # Reported as a bad request, like every other state clash in the API
    status_code = 400
    default_message = "Resource is not in a valid state for this operation"


class ProvisioningFailedError(AppError):
    status_code = 500
    default_message = "Failed to create user account. Join request remains pending."


class IdentityProviderError(Exception):
    """Raised by identity provider clients when a remote call fails."""


# ============================================================
# Supabase error helpers
# ============================================================
def extract_supabase_error(error: Exception) -> str:
    """
    Safely extract readable details from Supabase Python client errors.
    Handles:
      • GoTrue (Auth) errors
      • Generic Python exceptions
    """

    # Case 1: Supabase Auth / GoTrue errors
    if hasattr(error, "message"):
        try:
            return str(error.message)
        except Exception:
            pass

    # Case 2: errors with args (common)
    if hasattr(error, "args") and error.args:
        try:
            return str(error.args[0])
        except Exception:
            pass

    # Case 3: Plain string fallback
    try:
        return str(error)
    except Exception:
        return "Unknown Supabase error"

