"""Persistence of folders as a single compressed blob."""

from ..folder import Folder
from .base import BlobStore
from .file import FileBlobStore


def load_folder(store: BlobStore) -> Folder:
    """Read and decode the folder held by ``store``.

    Raises:
        StorageIOError: If the blob cannot be read.
        DecodingError: If the blob is not a valid deflate stream.
        DeserializationError: If the inflated bytes are not a folder.
    """
    return Folder.from_compressed_bytes(store.read())


def save_folder(store: BlobStore, folder: Folder) -> None:
    """Encode ``folder`` and write it to ``store``."""
    store.write(folder.to_compressed_bytes())


__all__ = ["BlobStore", "FileBlobStore", "load_folder", "save_folder"]
