# core/supabase_client.py

from typing import Optional

from supabase import create_client, Client
from core.config import settings
from core.logging_config import logger


# ============================================================
# Supabase Client Factory (ALWAYS service role)
# ============================================================

def get_supabase_client() -> Optional[Client]:
    """
    Creates a Supabase client using the SERVICE ROLE KEY.
    REQUIRED for:
        - auth.get_user (bearer token validation)
        - auth.admin.create_user / delete_user / list_users
        - auth.sign_in_with_otp (magic links)
    """
    try:
        supabase_url = settings.SUPABASE_URL
        supabase_key = settings.SUPABASE_SERVICE_ROLE_KEY  # MUST be service-role

        if not supabase_url or not supabase_key:
            logger.error("Missing Supabase credentials")
            logger.error(f"   URL: {supabase_url}")
            logger.error(f"   SERVICE ROLE KEY: {'SET' if supabase_key else 'MISSING'}")
            return None

        return create_client(supabase_url, supabase_key)

    except Exception as e:
        logger.error(f"Supabase Init Error: {e}", exc_info=True)
        return None


# ============================================================
# Alias: Admin Client
# ============================================================

def get_admin_client() -> Optional[Client]:
    """Alias for readability."""
    return get_supabase_client()


# ============================================================
# Ping Supabase Auth for health checks
# ============================================================

def ping_supabase() -> dict:
    """Lists a single auth user to prove the service-role key works."""
    try:
        client = get_supabase_client()
        if client is None:
            return {"service": "Supabase", "status": "not_configured"}

        client.auth.admin.list_users(page=1, per_page=1)
        return {"service": "Supabase", "status": "ok"}

    except Exception as e:
        logger.error(f"Supabase Ping Error: {e}", exc_info=True)
        return {"service": "Supabase", "status": "error", "detail": str(e)}
