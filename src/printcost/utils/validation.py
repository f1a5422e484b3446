import uuid
from typing import Optional


def parse_uuid(value: str) -> Optional[uuid.UUID]:
    """Parse a path parameter into a UUID, None when malformed."""
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None
