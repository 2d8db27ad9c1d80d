import uuid
from typing import Iterable

from ..exceptions import ValidationError

# Characters that must never appear in an uploaded file name
DANGEROUS_PATTERNS = ("..", "/", "\\", "<", ">", ":", '"', "|", "?", "*")


def validate_upload(
    file_name: str,
    mime_type: str,
    file_size: int,
    max_file_size: int,
    allowed_mime_types: Iterable[str],
) -> None:
    """Reject uploads that are too large, empty, of a disallowed type,
    or carry a file name that could escape the object key."""
    if file_size > max_file_size:
        raise ValidationError(
            f"File size exceeds {max_file_size // (1024 * 1024)}MB limit"
        )
    if file_size <= 0:
        raise ValidationError("Invalid file size")
    if mime_type not in allowed_mime_types:
        raise ValidationError(f"File type {mime_type} is not allowed")
    if not file_name or not file_name.strip():
        raise ValidationError("File name is required")
    if any(pattern in file_name for pattern in DANGEROUS_PATTERNS):
        raise ValidationError("File name contains invalid characters")


def make_object_key(user_id: str, file_name: str) -> str:
    """Generate a unique object key: uploads/{user}/{uuid}-{name}"""
    return f"uploads/{user_id}/{uuid.uuid4()}-{file_name}"
