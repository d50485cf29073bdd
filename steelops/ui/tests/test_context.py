import pytest

from steelops.auth.providers import LocalIdentityProvider, LocalUserDirectory
from steelops.config import get_config, set_config_for_test
from steelops.data.backends.csv_backend import CsvDataAccess
from steelops.services.chat import ChatClient
from steelops.services.payment import SimulatedPaymentGateway
from steelops.ui.context import build_context


@pytest.fixture
def ctx(tmp_path):
    set_config_for_test(otp_max_attempts=2, order_delivery_days=5)
    directory = LocalUserDirectory()
    context = build_context(
        get_config(),
        CsvDataAccess(tmp_path),
        LocalIdentityProvider(directory),
        SimulatedPaymentGateway(deliver=lambda challenge, otp: None),
        ChatClient("https://api.example.com/chat", None, "model"),
        user_agent="pytest",
    )
    yield context
    context.close()
    set_config_for_test()


def test_checkout_uses_configured_limits(ctx):
    assert ctx.checkout.max_otp_attempts == 2
    assert ctx.checkout.delivery_days == 5


def test_checkout_follows_signed_in_user(ctx):
    assert ctx.checkout.user_id is None
    user = ctx.auth.sign_up("EMP001", "buyer@rinl.co.in", "secret1", "vendor")
    ctx.auth.sign_in("buyer@rinl.co.in", "secret1")
    assert ctx.user_id == user.id
    assert ctx.checkout.user_id == user.id
    ctx.auth.sign_out()
    assert ctx.checkout.user_id is None


def test_chat_history_starts_with_greeting(ctx):
    assert ctx.chat_history[0].role == "assistant"
    assert "RINL" in ctx.chat_history[0].content


def test_close_detaches_from_identity(ctx):
    ctx.auth.sign_up("EMP001", "buyer@rinl.co.in", "secret1", "vendor")
    ctx.close()
    ctx.auth.identity.sign_in_with_password("buyer@rinl.co.in", "secret1")
    assert not ctx.auth.is_authenticated
