"""Service layer exports."""

from . import (
	attempt_ledger,
	challenge_code_service,
	directory_service,
	fee_service,
	notification_service,
	verification_service,
)

__all__ = [
	"attempt_ledger",
	"challenge_code_service",
	"directory_service",
	"fee_service",
	"notification_service",
	"verification_service",
]
