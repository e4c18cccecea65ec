"""Cursor persistence.

One small JSON file per check identity. The file name is a digest of the
credential context and the argument vector, so checks with different
arguments or accounts never share a cursor.
"""

from __future__ import annotations

import hashlib
import logging
import os
import tempfile
from collections.abc import Mapping, Sequence
from contextlib import suppress
from pathlib import Path

import aiofiles
import aiofiles.os
from pydantic import ValidationError

from .errors import CursorStoreError
from .models import Cursor

STATE_DIR_ENV = "LOGS_INSIGHTS_CHECK_STATE_DIR"
STATE_SUBDIR = "logs-insights-check"
IDENTITY_ENV_VARS = ("AWS_PROFILE", "AWS_ACCESS_KEY_ID", "AWS_REGION")

logger = logging.getLogger(__name__)


def default_state_dir() -> Path:
    """Return the state directory used when none is configured."""
    raw = os.getenv(STATE_DIR_ENV)
    if raw:
        return Path(raw).expanduser()
    return Path(tempfile.gettempdir()) / STATE_SUBDIR


def state_file_path(
    state_dir: str | Path,
    argv: Sequence[str],
    *,
    env: Mapping[str, str] | None = None,
) -> Path:
    """Return the cursor file path for this credential context and argv."""
    if env is None:
        env = os.environ
    parts = [env.get(name, "") for name in IDENTITY_ENV_VARS]
    parts.append(" ".join(argv))
    digest = hashlib.md5(" ".join(parts).encode("utf-8")).hexdigest()
    return Path(state_dir) / f"{digest}.json"


class CursorStore:
    """Load and atomically save the cursor file."""

    def __init__(self, path: str | Path, *, logger: logging.Logger = logger) -> None:
        self.path = Path(path)
        self._logger = logger

    async def load(self) -> Cursor | None:
        """Return the stored cursor, or None on cold start or corrupt content."""
        try:
            async with aiofiles.open(self.path, encoding="utf-8") as f:
                text = await f.read()
        except FileNotFoundError:
            self._logger.debug("no cursor file at %s", self.path)
            return None
        except (OSError, UnicodeDecodeError) as exc:
            raise CursorStoreError(f"failed to read cursor file {self.path}: {exc}") from exc

        try:
            cursor = Cursor.model_validate_json(text)
        except ValidationError as exc:
            self._logger.warning("ignoring corrupt cursor file %s: %s", self.path, exc)
            return None

        self._logger.debug("loaded cursor from %s: %s", self.path, cursor)
        return cursor

    async def save(self, cursor: Cursor) -> None:
        """Write via a temp file in the same directory, then replace."""
        self._logger.debug("saving cursor to %s: %s", self.path, cursor)
        await aiofiles.os.makedirs(self.path.parent, exist_ok=True)

        tmp = self.path.with_name(f".{self.path.name}.{os.getpid()}.tmp")
        try:
            async with aiofiles.open(tmp, "w", encoding="utf-8") as f:
                await f.write(cursor.model_dump_json() + "\n")
                await f.flush()
            await aiofiles.os.replace(tmp, self.path)
        except BaseException:
            with suppress(OSError):
                await aiofiles.os.remove(tmp)
            raise
