import re

from infra_client.errors import InvalidArgumentError

_UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE
)


def is_valid_uuid(value: str) -> bool:
    return isinstance(value, str) and _UUID_PATTERN.match(value) is not None


def require_uuid(**identifiers: str) -> None:
    """Raise InvalidArgumentError naming every identifier that is not a UUID"""
    invalid = [name for name, value in identifiers.items() if not is_valid_uuid(value)]
    if invalid:
        names = " and ".join(f"'{name}'" for name in invalid)
        raise InvalidArgumentError(f"{names} {'is' if len(invalid) == 1 else 'are'} invalid")


def require_present(**identifiers: str) -> None:
    missing = [name for name, value in identifiers.items() if not value]
    if missing:
        names = " and ".join(f"'{name}'" for name in missing)
        raise InvalidArgumentError(f"{names} {'is' if len(missing) == 1 else 'are'} required")
