"""Base interface for blob transports."""

from abc import ABC, abstractmethod


class BlobStore(ABC):
    """Reads and writes the single compressed blob of a folder."""

    @abstractmethod
    def exists(self) -> bool:
        """Whether a blob has been written."""

    @abstractmethod
    def read(self) -> bytes:
        """Read the stored blob.

        Raises:
            StorageIOError: If the blob cannot be read.
        """

    @abstractmethod
    def write(self, blob: bytes) -> None:
        """Replace the stored blob.

        Raises:
            StorageIOError: If the blob cannot be written.
        """
