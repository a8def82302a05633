from .admin import is_admin, has_command, privileged
from .colors import *
from .console import Console
from .process import Process

__all__ = [
    "is_admin",
    "has_command",
    "privileged",
    "Console",
    "Process",
]
