from .orchestrator import RecoveryOrchestrator, recover

__all__ = ["RecoveryOrchestrator", "recover"]
