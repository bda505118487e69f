import uuid


def parse_uuid(value) -> uuid.UUID | None:
    if value is None or isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


def normalize_uuid(value) -> str | None:
    parsed = parse_uuid(value)
    return str(parsed) if parsed is not None else None
