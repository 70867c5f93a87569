import logging

from exceptions.exceptions import ValidationError

log = logging.getLogger(__name__)

MAX_ID_LENGTH = 50


def validate_id(value: str, name_of_id: str) -> str:
    """Reject empty ids and ids longer than MAX_ID_LENGTH code points."""
    if not value:
        log.warning(f"{name_of_id} id required")
        raise ValidationError(f"{name_of_id} id required")
    if len(value) > MAX_ID_LENGTH:
        log.warning(f"{name_of_id} id is too long: {len(value)} characters")
        raise ValidationError(f"{name_of_id} id is too long")
    return value


def validate_task_id(task_id: str) -> str:
    return validate_id(task_id, "task")
