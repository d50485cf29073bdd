"""Form validation and user-facing wording for the login and signup pages."""
from __future__ import annotations

import re
from typing import Optional

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 6
ROLES = {"admin": "Admin", "supervisor": "Supervisor", "vendor": "Vendor"}


def validate_email(email: str) -> bool:
    return bool(EMAIL_RE.match(email or ""))


def validate_login_form(email: str, password: str) -> Optional[str]:
    if not validate_email(email):
        return "Please enter a valid email address"
    if not password:
        return "Please enter your password"
    return None


def validate_signup_form(employee_id: str, email: str, password: str, confirm_password: str, role: str) -> Optional[str]:
    if not (employee_id or "").strip():
        return "Employee ID is required"
    if not (email or "").strip():
        return "Email address is required"
    if not validate_email(email):
        return "Please enter a valid email address"
    if not password:
        return "Password is required"
    if len(password) < MIN_PASSWORD_LENGTH:
        return f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
    if password != confirm_password:
        return "Passwords do not match"
    if role not in ROLES:
        return "Please select a role"
    return None


def login_error_message(message: str) -> str:
    if "Email not confirmed" in message:
        return "Please check your email and click the confirmation link before signing in."
    if "Invalid login credentials" in message:
        return "Invalid email or password. Please check your credentials and try again."
    if "Email rate limit exceeded" in message:
        return "Too many login attempts. Please wait a moment before trying again."
    return message or "An error occurred during sign in. Please try again."


def signup_error_message(message: str) -> str:
    if "User already registered" in message:
        return "An account with this email already exists. Please use a different email or try logging in."
    if "over_email_send_rate_limit" in message:
        return "For security purposes, you can only request this after 12 seconds."
    if "email_address_invalid" in message:
        return "Please enter a valid email address."
    if "password_too_short" in message or "Password should be at least" in message:
        return "Password must be at least 6 characters long."
    if "signup_disabled" in message:
        return "Account registration is currently disabled."
    if "duplicate key value violates unique constraint" in message:
        if "users_email_key" in message:
            return "An account with this email already exists."
        if "users_employee_id_key" in message:
            return "An account with this employee ID already exists."
        return "This account information is already in use."
    return message or "An error occurred during signup. Please try again."
