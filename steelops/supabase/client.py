from typing import Optional
from supabase import Client, create_client
from steelops.config import get_config
from steelops.logging import get_logger

class SupabaseConnection:
    """Handles Supabase credential selection and client creation using AppConfig singleton."""
    def __init__(self) -> None:
        """Initializes the connection handler using the singleton AppConfig."""
        self.config = get_config()
        self.logger = get_logger(__name__)
        self._client: Optional[Client] = None

    def get_credentials(self) -> tuple[str, str]:
        """Picks the project URL and API key from AppConfig values.

        The service role key wins when both are set, so server-side deployments
        can bypass row level security; the anon key is the browser-equivalent default.

        Returns:
            tuple[str, str]: The Supabase URL and API key.
        Raises:
            RuntimeError: If required configuration is missing.
        """
        if self.config.supabase_url and self.config.supabase_service_role_key:
            self.logger.info("Configuring Supabase access with service role key")
            return self.config.supabase_url, self.config.supabase_service_role_key
        elif self.config.supabase_url and self.config.supabase_anon_key:
            self.logger.info("Configuring Supabase access with anon key")
            return self.config.supabase_url, self.config.supabase_anon_key
        else:
            self.logger.error("Missing Supabase configuration values.")
            raise RuntimeError("Missing Supabase configuration values.")

    def get_client(self) -> Client:
        """Returns an authenticated Supabase client, created on first use.

        Returns:
            Client: The Supabase client instance.
        """
        if self._client is None:
            url, key = self.get_credentials()
            self.logger.info(f"Instantiating Supabase client for: {url}")
            self._client = create_client(url, key)
        return self._client

    def create_session_client(self) -> Client:
        """Returns a new client for one browser session's auth state.

        Auth sessions live on the client object, so each visitor needs their own.
        The anon key is preferred here, since the session client acts as the user.
        """
        if self.config.supabase_url and self.config.supabase_anon_key:
            return create_client(self.config.supabase_url, self.config.supabase_anon_key)
        url, key = self.get_credentials()
        return create_client(url, key)

def get_supabase_connection() -> SupabaseConnection:
    """Returns a new SupabaseConnection instance using the latest config."""
    return SupabaseConnection()
