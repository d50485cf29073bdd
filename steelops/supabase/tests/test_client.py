import pytest
from steelops.supabase import client as client_module
from steelops.supabase.client import SupabaseConnection
from steelops.config import set_config_for_test

class MockClient:
    def __init__(self, url, key):
        self.url = url
        self.key = key

@pytest.fixture(autouse=True)
def clear_env(monkeypatch):
    for var in ["SUPABASE_URL", "SUPABASE_ANON_KEY", "SUPABASE_SERVICE_ROLE_KEY"]:
        monkeypatch.delenv(var, raising=False)

@pytest.fixture(autouse=True)
def patch_create_client(monkeypatch):
    monkeypatch.setattr(client_module, "create_client", MockClient)
    yield

def test_service_role_key():
    """Service role key is preferred when both keys are configured."""
    set_config_for_test(
        supabase_url="https://plant.supabase.co",
        supabase_anon_key="anon-key",
        supabase_service_role_key="service-key",
    )
    client = SupabaseConnection().get_client()
    assert client.url == "https://plant.supabase.co"
    assert client.key == "service-key"

def test_anon_key():
    """Anon key is used when no service role key is set."""
    set_config_for_test(
        supabase_url="https://plant.supabase.co",
        supabase_anon_key="anon-key",
        supabase_service_role_key=None,
    )
    client = SupabaseConnection().get_client()
    assert client.key == "anon-key"

def test_client_is_reused():
    set_config_for_test(supabase_url="https://plant.supabase.co", supabase_anon_key="anon-key")
    connection = SupabaseConnection()
    assert connection.get_client() is connection.get_client()

def test_missing_config():
    """Test error if no config is available."""
    set_config_for_test(
        supabase_url=None,
        supabase_anon_key=None,
        supabase_service_role_key=None,
    )
    connection = SupabaseConnection()
    with pytest.raises(RuntimeError):
        _ = connection.get_client()

def test_url_without_key():
    set_config_for_test(supabase_url="https://plant.supabase.co", supabase_anon_key=None, supabase_service_role_key=None)
    with pytest.raises(RuntimeError):
        SupabaseConnection().get_credentials()

def test_session_client_prefers_anon_key():
    """Browser-session clients act as the user, so they use the anon key."""
    set_config_for_test(
        supabase_url="https://plant.supabase.co",
        supabase_anon_key="anon-key",
        supabase_service_role_key="service-key",
    )
    connection = SupabaseConnection()
    session_client = connection.create_session_client()
    assert session_client.key == "anon-key"
    assert session_client is not connection.create_session_client()
