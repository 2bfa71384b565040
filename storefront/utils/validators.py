from storefront.constants import PASSWORD_MIN_LENGTH, message
from storefront.utils.formatting import is_valid_phone_number


def require_fields(values: dict[str, str | None], text: str | None = None) -> dict[str, str]:
    """Return {field: message} for every blank value."""
    text = text or message("REQUIRED_FIELD")
    return {
        name: text
        for name, value in values.items()
        if value is None or not str(value).strip()
    }


def is_valid_email(email: str | None) -> bool:
    # Loose check only; the API owns real validation.
    return bool(email) and "@" in email


def check_phone(errors: dict[str, str], field: str, phone: str | None) -> None:
    if field not in errors and not is_valid_phone_number(phone):
        errors[field] = message("INVALID_PHONE")


def check_email(errors: dict[str, str], field: str, email: str | None) -> None:
    if field not in errors and not is_valid_email(email):
        errors[field] = message("INVALID_EMAIL")


def check_password(errors: dict[str, str], password: str | None, confirm: str | None) -> None:
    if not password:
        errors["password"] = message("REQUIRED_FIELD")
    elif len(password) < PASSWORD_MIN_LENGTH:
        errors["password"] = message("WEAK_PASSWORD")
    if password != confirm:
        errors["password_confirm"] = message("PASSWORDS_DONT_MATCH")
