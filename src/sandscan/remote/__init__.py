"""Remote sandbox boundary - command execution and file reads."""

from sandscan.remote.client import RemoteClient
from sandscan.remote.local import LocalSandbox
from sandscan.remote.models import CommandResult, SandboxClient, normalize_command_result

__all__ = [
    "CommandResult",
    "LocalSandbox",
    "RemoteClient",
    "SandboxClient",
    "normalize_command_result",
]
