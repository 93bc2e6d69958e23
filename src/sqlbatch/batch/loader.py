"""Discover query files in a script directory."""

import logging
from pathlib import Path
from typing import List, Union

from sqlbatch.errors import DirectoryNotFound
from .models import ScriptFile


logger = logging.getLogger(__name__)

SCRIPT_SUFFIX = ".sql"


class ScriptLoader:
    """List query files in a directory in a stable order."""

    def __init__(self, script_dir: Union[str, Path]):
        self.script_dir = Path(script_dir)

    def list_scripts(self) -> List[ScriptFile]:
        """
        Return the directory's .sql files sorted by full path.

        Only regular files directly inside the directory are considered; the
        suffix match ignores case. Calling this twice on unchanged contents
        returns the same sequence.

        Raises:
            DirectoryNotFound: path is missing, not a directory or unreadable
        """
        if not self.script_dir.exists():
            raise DirectoryNotFound(self.script_dir)

        if not self.script_dir.is_dir():
            raise DirectoryNotFound(self.script_dir, reason="is not a directory")

        try:
            entries = list(self.script_dir.iterdir())
        except OSError as e:
            logger.error(f"Cannot list {self.script_dir}: {e}")
            raise DirectoryNotFound(self.script_dir, reason="is not readable") from e

        scripts = [
            ScriptFile(path=entry)
            for entry in entries
            if entry.suffix.lower() == SCRIPT_SUFFIX and entry.is_file()
        ]
        scripts.sort(key=lambda s: str(s.path))

        if not scripts:
            logger.warning(f"No {SCRIPT_SUFFIX} files found in {self.script_dir}")
        else:
            logger.debug(f"Found {len(scripts)} script(s) in {self.script_dir}")

        return scripts
