"""Audit event type definitions."""

from enum import Enum


class EventType(str, Enum):
    """Audit event types."""

    # Folder events
    FOLDER_CREATE = "folder.create"

    # Entry events
    ENTRY_CREATE = "entry.create"
    ENTRY_READ = "entry.read"
    ENTRY_UPDATE = "entry.update"
    ENTRY_DELETE = "entry.delete"
    ENTRY_LIST = "entry.list"
