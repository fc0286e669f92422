from coterie.errors import ValidationError

MIN_PASSWORD_LENGTH = 8


def validate_password(password: str) -> None:
    """Validate password meets requirements.

    Requirements:
    - Minimum length of 8 characters
    - Not only whitespace

    Raises:
        ValidationError: If password doesn't meet requirements
    """
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

    if not password.strip():
        raise ValidationError("Password cannot be blank")


def validate_email(email: str) -> None:
    local, sep, domain = email.partition("@")
    if not sep or not local or not domain:
        raise ValidationError("Invalid email address")
