"""Record validation package."""

from spinspend.validation.validator import (
    RecordValidationError,
    RecordValidator,
    parse_amount,
)

__all__ = ["RecordValidationError", "RecordValidator", "parse_amount"]
