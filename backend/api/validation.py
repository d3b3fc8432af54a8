"""Path parameter validation"""
import re

# GitHub logins and repo names: alphanumerics, '.', '_', '-', at most 39 chars
GITHUB_NAME_PATTERN = re.compile(r"[a-zA-Z0-9._-]{1,39}")


class ValidationError(ValueError):
    pass


def validate_github_name(name: str, field_name: str) -> str:
    if not name or not isinstance(name, str):
        raise ValidationError(f"{field_name} is required")
    if not GITHUB_NAME_PATTERN.fullmatch(name):
        raise ValidationError(f"{field_name} contains invalid characters or exceeds length limit")
    return name
