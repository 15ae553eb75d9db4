# Controllers package
from .backup_manager import BackupManager, MAX_BACKUPS

__all__ = ['BackupManager', 'MAX_BACKUPS']
