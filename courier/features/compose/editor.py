"""Draft editing surface backed by the user's text editor."""

import os
import shlex
import subprocess
import tempfile
from pathlib import Path
from typing import Callable, List, Optional

from courier.utils.errors import EditorError
from courier.utils.logging import get_logger
from courier.utils.paths import DRAFTS_DIR

logger = get_logger(__name__)

OnSave = Callable[[str], None]


class DraftEditor:
    """Opens a draft in ``$VISUAL``/``$EDITOR`` on a temporary file.

    While the editor runs, the file is watched; every write is reported to
    ``on_save`` as a checkpoint. The editor exiting is the close request and
    ``edit`` returns the final text.
    """

    def __init__(
        self,
        command: Optional[str] = None,
        workdir: Path = DRAFTS_DIR,
        poll_interval: float = 0.5,
    ):
        self.command = command
        self.workdir = Path(workdir)
        self.poll_interval = poll_interval

    def resolve_command(self) -> List[str]:
        command = (
            self.command
            or os.environ.get("VISUAL")
            or os.environ.get("EDITOR")
            or "vi"
        )
        return shlex.split(command)

    def edit(self, text: str, on_save: Optional[OnSave] = None) -> str:
        try:
            self.workdir.mkdir(parents=True, exist_ok=True)
            fd, name = tempfile.mkstemp(prefix="draft-", suffix=".eml", dir=self.workdir)
        except OSError as e:
            raise EditorError(f"Cannot create draft file: {e}") from e

        path = Path(name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)

            argv = self.resolve_command() + [str(path)]
            logger.debug(f"Opening editor: {argv}")
            try:
                process = subprocess.Popen(argv)
            except OSError as e:
                raise EditorError(f"Cannot start editor '{argv[0]}': {e}") from e

            last_seen = path.stat().st_mtime_ns
            while True:
                try:
                    process.wait(timeout=self.poll_interval)
                    break
                except subprocess.TimeoutExpired:
                    last_seen = self._report_save(path, last_seen, on_save)

            if process.returncode != 0:
                raise EditorError(f"Editor exited with status {process.returncode}")

            return path.read_text(encoding="utf-8")

        finally:
            path.unlink(missing_ok=True)

    @staticmethod
    def _report_save(path: Path, last_seen: int, on_save: Optional[OnSave]) -> int:
        try:
            mtime = path.stat().st_mtime_ns
        except FileNotFoundError:
            return last_seen

        if mtime != last_seen and on_save is not None:
            on_save(path.read_text(encoding="utf-8"))

        return mtime
