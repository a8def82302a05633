from .firmware import FirmwareService
from .reboot import RebootService
from .steps import Step, StepRunner, StepFailed, PreconditionFailed
from .system import SystemService
from .updater import Updater

__all__ = [
    "FirmwareService",
    "RebootService",
    "Step",
    "StepRunner",
    "StepFailed",
    "PreconditionFailed",
    "SystemService",
    "Updater",
]
