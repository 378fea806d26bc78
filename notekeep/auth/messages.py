"""User-facing text for provider auth error codes."""

UNKNOWN_ERROR = "An unknown error occurred."
GENERIC_FAILURE = "Authentication failed. Please try again."

_MESSAGES = {
    "auth/user-not-found": "Invalid email or password.",
    "auth/wrong-password": "Invalid email or password.",
    "auth/email-already-in-use": "An account with this email already exists.",
    "auth/weak-password": "Password must be at least 6 characters.",
    "auth/invalid-email": "Please enter a valid email address.",
}


def friendly_auth_message(code: str | None) -> str:
    if not code:
        return UNKNOWN_ERROR
    return _MESSAGES.get(code, GENERIC_FAILURE)
