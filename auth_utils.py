import logging
from typing import Any, Dict, Optional

from supabase import create_client, Client
from config import Config

logger = logging.getLogger(__name__)

UNEXPECTED_ERROR = "An unexpected error occurred"

_supabase: Optional[Client] = None


def get_supabase() -> Client:
    """Shared anon client used for sign in / sign up."""
    global _supabase
    if _supabase is None:
        _supabase = create_client(Config.SUPABASE_URL, Config.SUPABASE_KEY)
    return _supabase


def client_for_token(access_token: str, refresh_token: Optional[str] = None) -> Client:
    """
    New client acting as the signed-in user, so row level security applies.
    The refresh token is only needed for account changes (email, password),
    which go through the auth session rather than the table API.
    """
    client = create_client(Config.SUPABASE_URL, Config.SUPABASE_KEY)
    client.postgrest.auth(access_token)
    if refresh_token:
        client.auth.set_session(access_token, refresh_token)
    return client


def _error_message(e: Exception) -> str:
    # Supabase auth errors carry a user-readable .message
    message = getattr(e, "message", None)
    return message if isinstance(message, str) and message else UNEXPECTED_ERROR


def _session_payload(response: Any) -> Dict[str, Any]:
    user = getattr(response, "user", None)
    session = getattr(response, "session", None)
    return {
        "error": None,
        "user_id": getattr(user, "id", None),
        "email": getattr(user, "email", None),
        "access_token": getattr(session, "access_token", None),
        "refresh_token": getattr(session, "refresh_token", None),
    }


def login_user(email: str, password: str, client: Optional[Client] = None) -> Dict[str, Any]:
    client = client or get_supabase()
    try:
        response = client.auth.sign_in_with_password({
            "email": (email or "").strip(),
            "password": password,
        })
    except Exception as e:
        logger.error("Sign in error: %s", e)
        return {"error": _error_message(e)}
    logger.info("Sign in successful: %s", getattr(response.user, "id", None))
    return _session_payload(response)


def register_user(email: str, password: str, client: Optional[Client] = None) -> Dict[str, Any]:
    client = client or get_supabase()
    try:
        response = client.auth.sign_up({
            "email": (email or "").strip(),
            "password": password,
        })
    except Exception as e:
        logger.error("Sign up error: %s", e)
        return {"error": _error_message(e)}

    logger.info("Sign up successful: %s", getattr(response.user, "id", None))

    # Projects without email confirmation return a user but no session
    if response.user is not None and response.session is None:
        result = login_user(email, password, client=client)
        if result["error"]:
            return {
                "error": "Account created but failed to sign in automatically. Please try signing in manually."
            }
        return result

    return _session_payload(response)


def logout_user(client: Optional[Client] = None) -> None:
    client = client or get_supabase()
    try:
        client.auth.sign_out()
    except Exception as e:
        logger.error("Sign out error: %s", e)


def get_user_from_token(token: str, client: Optional[Client] = None):
    """Return the Supabase user for an access token, or None if it is not valid."""
    if not token:
        return None
    client = client or get_supabase()
    try:
        response = client.auth.get_user(token)
    except Exception as e:
        logger.warning("Token lookup failed: %s", e)
        return None
    return getattr(response, "user", None) if response else None
