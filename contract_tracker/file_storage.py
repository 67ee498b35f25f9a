"""
Contract Tracker - File Storage
Local directory storage for files attached to contracts.
"""

import logging
import time
from pathlib import Path
from typing import Optional

from werkzeug.utils import secure_filename

logger = logging.getLogger(__name__)


class UnsafePathError(ValueError):
    """Raised when a file reference would escape the upload directory."""


class LocalFileStorage:
    """Stores uploaded contract files under a single directory."""

    def __init__(self, upload_dir: Path):
        self.upload_dir = Path(upload_dir)
        self.upload_dir.mkdir(parents=True, exist_ok=True)

    def save(self, file) -> str:
        """Save an uploaded file (werkzeug FileStorage) and return its reference."""
        filename = secure_filename(file.filename or '') or 'upload'
        reference = f"{int(time.time() * 1000)}-{filename}"
        file.save(str(self.upload_dir / reference))
        logger.info(f"Stored contract file {reference}")
        return reference

    def resolve(self, reference: str) -> Optional[Path]:
        """Absolute path of a stored file, or None if it does not exist."""
        root = self.upload_dir.resolve()
        path = (root / reference).resolve()
        if root not in path.parents:
            raise UnsafePathError(reference)
        return path if path.is_file() else None

    def delete(self, reference: str) -> bool:
        """Remove a stored file. Missing files are ignored."""
        path = self.resolve(reference)
        if path is None:
            logger.warning(f"Contract file already gone: {reference}")
            return False
        path.unlink()
        logger.info(f"Deleted contract file {reference}")
        return True
