from steelops.auth.messages import (
    login_error_message,
    signup_error_message,
    validate_email,
    validate_login_form,
    validate_signup_form,
)


def test_validate_email():
    assert validate_email("ops@rinl.co.in")
    assert not validate_email("ops@rinl")
    assert not validate_email("ops rinl@co.in")


def test_login_form():
    assert validate_login_form("bad", "x") == "Please enter a valid email address"
    assert validate_login_form("ops@rinl.co.in", "") == "Please enter your password"
    assert validate_login_form("ops@rinl.co.in", "secret1") is None


def test_signup_form_checks_in_order():
    assert validate_signup_form("", "", "", "", "") == "Employee ID is required"
    assert validate_signup_form("E1", "", "", "", "") == "Email address is required"
    assert validate_signup_form("E1", "ops@rinl.co.in", "12345", "12345", "admin") == \
        "Password must be at least 6 characters long"
    assert validate_signup_form("E1", "ops@rinl.co.in", "secret1", "secret2", "admin") == "Passwords do not match"
    assert validate_signup_form("E1", "ops@rinl.co.in", "secret1", "secret1", "") == "Please select a role"
    assert validate_signup_form("E1", "ops@rinl.co.in", "secret1", "secret1", "vendor") is None


def test_unconfirmed_email_message():
    assert login_error_message("Email not confirmed") == \
        "Please check your email and click the confirmation link before signing in."


def test_signup_duplicate_constraint_messages():
    assert signup_error_message('duplicate key value violates unique constraint "users_employee_id_key"') == \
        "An account with this employee ID already exists."
    assert signup_error_message("User already registered").startswith("An account with this email already exists")
