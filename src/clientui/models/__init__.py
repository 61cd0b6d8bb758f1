r"""
Centralized access to the client's data models.

Example:

from clientui.models import ClassifiedError, ErrorKind, PageContext, Patient
"""

from .errors import ErrorKind, FieldError, ClassifiedError, KIND_TO_STATUS, http_status_for
from .page import PageContext, RecoveryState, RenderView, Redirect, RecoveredModel
from .beans import Patient, Note, RiskLevel, ValidationErrorDetail, UNDEFINED_RISK

__all__ = [
    "ErrorKind",
    "FieldError",
    "ClassifiedError",
    "KIND_TO_STATUS",
    "http_status_for",
    "PageContext",
    "RecoveryState",
    "RenderView",
    "Redirect",
    "RecoveredModel",
    "Patient",
    "Note",
    "RiskLevel",
    "ValidationErrorDetail",
    "UNDEFINED_RISK",
]
