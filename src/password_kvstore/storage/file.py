"""Private-file blob transport."""

import os
import tempfile
from pathlib import Path
from typing import Union

import structlog

from ..errors import StorageIOError
from .base import BlobStore

logger = structlog.get_logger(__name__)

FILE_MODE = 0o600
DIR_MODE = 0o700


class FileBlobStore(BlobStore):
    """Stores a blob in a single file readable only by its owner.

    Writes go to a temporary file in the same directory which then
    replaces the target, so a failed write never truncates the old blob.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path).expanduser()

    def exists(self) -> bool:
        return self.path.is_file()

    def read(self) -> bytes:
        try:
            with open(self.path, "rb") as f:
                blob = f.read()
        except OSError as e:
            raise StorageIOError(f"failed to read {self.path}: {e}") from e
        logger.debug("blob_read", path=str(self.path), size=len(blob))
        return blob

    def write(self, blob: bytes) -> None:
        try:
            os.makedirs(self.path.parent, mode=DIR_MODE, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=".pwkv-", dir=str(self.path.parent))
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(blob)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_path, self.path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
            os.chmod(self.path, FILE_MODE)
        except OSError as e:
            raise StorageIOError(f"failed to write {self.path}: {e}") from e
        logger.debug("blob_written", path=str(self.path), size=len(blob))
