# core/identity_provider.py

from typing import Optional

from supabase import Client

from core.config import settings
from core.errors import IdentityProviderError, extract_supabase_error
from core.logging_config import logger
from core.supabase_client import get_admin_client


# ============================================================
# Identity provider contract
# ============================================================
class IdentityProviderClient:
    """
    External system of record for authentication identities.

    Implementations raise IdentityProviderError when a remote call fails.
    None of the calls are retried here.
    """

    def find_user(self, email: str) -> Optional[str]:
        """Return the identity id registered for `email`, or None."""
        raise NotImplementedError

    def create_user(self, email: str, password: str, metadata: dict = None) -> str:
        """Create a confirmed identity and return its id."""
        raise NotImplementedError

    def issue_sign_in_link(
        self,
        email: str,
        redirect_to: Optional[str] = None,
        create_identity: bool = False,
    ) -> None:
        """Send a one-time sign-in link to `email`."""
        raise NotImplementedError

    def update_email(self, email: str, new_email: str) -> bool:
        """Move the identity for `email` to `new_email`. Returns False if none existed."""
        raise NotImplementedError

    def delete_user(self, email: str) -> bool:
        """Delete the identity for `email`. Returns False if none existed."""
        raise NotImplementedError


LIST_USERS_PAGE_SIZE = 1000


def default_sign_in_redirect() -> str:
    return f"{settings.APP_URL.rstrip('/')}/auth/callback"


# ============================================================
# Supabase Auth implementation (service role)
# ============================================================
class SupabaseIdentityProvider(IdentityProviderClient):

    def __init__(self, client: Optional[Client] = None):
        self._client = client

    @property
    def client(self) -> Client:
        if self._client is None:
            self._client = get_admin_client()
        if self._client is None:
            raise IdentityProviderError("Supabase client not configured")
        return self._client

    def find_user(self, email: str) -> Optional[str]:
        # GoTrue has no lookup-by-email on the admin API, walk every page.
        # The server may cap per_page, so only an empty page ends the scan.
        target = email.lower()
        page = 1

        while True:
            try:
                users = self.client.auth.admin.list_users(
                    page=page, per_page=LIST_USERS_PAGE_SIZE
                )
            except Exception as e:
                raise IdentityProviderError(
                    f"Failed to list auth users: {extract_supabase_error(e)}"
                ) from e

            if not users:
                return None

            for user in users:
                if (user.email or "").lower() == target:
                    return user.id

            page += 1

    def create_user(self, email: str, password: str, metadata: dict = None) -> str:
        existing_id = self.find_user(email)
        if existing_id:
            logger.info(f"Auth identity for {email} already exists, reusing it")
            return existing_id

        try:
            result = self.client.auth.admin.create_user(
                {
                    "email": email,
                    "password": password,
                    "email_confirm": True,
                    "user_metadata": metadata or {},
                }
            )
        except Exception as e:
            raise IdentityProviderError(
                f"Failed to create auth user: {extract_supabase_error(e)}"
            ) from e

        if not result or not result.user:
            raise IdentityProviderError("Failed to create auth user: empty response")

        logger.info(f"Auth identity created for {email}")
        return result.user.id

    def issue_sign_in_link(
        self,
        email: str,
        redirect_to: Optional[str] = None,
        create_identity: bool = False,
    ) -> None:
        try:
            self.client.auth.sign_in_with_otp(
                {
                    "email": email,
                    "options": {
                        "should_create_user": create_identity,
                        "email_redirect_to": redirect_to or default_sign_in_redirect(),
                    },
                }
            )
        except Exception as e:
            raise IdentityProviderError(
                f"Failed to send magic link: {extract_supabase_error(e)}"
            ) from e

    def update_email(self, email: str, new_email: str) -> bool:
        identity_id = self.find_user(email)
        if not identity_id:
            return False

        try:
            self.client.auth.admin.update_user_by_id(identity_id, {"email": new_email})
        except Exception as e:
            raise IdentityProviderError(
                f"Failed to update auth user: {extract_supabase_error(e)}"
            ) from e

        logger.info(f"Auth identity email changed from {email} to {new_email}")
        return True

    def delete_user(self, email: str) -> bool:
        identity_id = self.find_user(email)
        if not identity_id:
            return False

        try:
            self.client.auth.admin.delete_user(identity_id)
        except Exception as e:
            raise IdentityProviderError(
                f"Failed to delete auth user: {extract_supabase_error(e)}"
            ) from e

        logger.info(f"Auth identity deleted for {email}")
        return True


# ============================================================
# FastAPI dependency
# ============================================================
def get_identity_provider() -> IdentityProviderClient:
    return SupabaseIdentityProvider()
