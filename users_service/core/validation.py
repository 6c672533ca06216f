"""Request validation shared by every user operation."""

from collections.abc import Mapping
from typing import Any, TypeVar

import structlog
from pydantic import ValidationError

from users_service.core.exceptions import InvalidArgumentException
from users_service.schemas.users import RequestSchema

logger = structlog.get_logger(__name__)

RequestT = TypeVar("RequestT", bound=RequestSchema)


def validate_request(schema: type[RequestT], payload: Mapping[str, Any] | RequestT) -> RequestT:
    """
    Validate an inbound payload against one request schema.

    Args:
        schema: Request schema whose rules apply
        payload: Raw request body or an already built request

    Returns:
        Typed request

    Raises:
        InvalidArgumentException: With the schema's fixed message on any rule violation
    """
    try:
        return schema.model_validate(payload)
    except ValidationError as e:
        logger.error(
            "request_validation_failed",
            schema=schema.__name__,
            errors=e.errors(include_url=False, include_context=False, include_input=False),
        )
        raise InvalidArgumentException(schema.invalid_message) from e
