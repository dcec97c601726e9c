"""Service modules"""
from .bootstrap import BootstrapOrchestrator, BootstrapResult, StepOutcome, StepStatus
from .reporter import VerificationReporter

__all__ = [
    "BootstrapOrchestrator",
    "BootstrapResult",
    "StepOutcome",
    "StepStatus",
    "VerificationReporter",
]
