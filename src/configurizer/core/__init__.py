"""Core functionality for configurizer."""

from .backup import BackupManager, BackupResult
from .bootstrap import BootstrapManager
from .config import Config
from .inventory import INVENTORY, ConfigItem, ItemKind
from .restore import RestoreManager, RestoreResult
from .setup import SetupManager
from .verify import Completeness, VerificationReport, VerifyManager

__all__ = [
    "INVENTORY",
    "BackupManager",
    "BackupResult",
    "BootstrapManager",
    "Completeness",
    "Config",
    "ConfigItem",
    "ItemKind",
    "RestoreManager",
    "RestoreResult",
    "SetupManager",
    "VerificationReport",
    "VerifyManager",
]
