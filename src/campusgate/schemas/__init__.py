"""Public schema exports."""

from .records import GateDashboard, ReceiptRead, StudentSummary, UserSummary, VerificationRecordRead
from .verification import (
	CodeRequiredResponse,
	GateFailure,
	GateStudent,
	VerificationRequest,
	VerificationResponse,
)

__all__ = [
	"CodeRequiredResponse",
	"GateDashboard",
	"GateFailure",
	"GateStudent",
	"ReceiptRead",
	"StudentSummary",
	"UserSummary",
	"VerificationRecordRead",
	"VerificationRequest",
	"VerificationResponse",
]
