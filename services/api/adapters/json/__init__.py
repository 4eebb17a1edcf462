"""
JSON file storage for page config documents.
One pretty-printed file per page key, flat in the config directory.
No locking: concurrent writes to the same page are last-write-wins.
"""
import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Optional

from core.errors import ConfigIOError, ConfigNotFoundError, ConfigParseError
from core.page_keys import PageKey

logger = logging.getLogger(__name__)


class LocalConfigStore:
    """
    Disk-backed config store.
    Blocking file calls run in the default executor so the event loop keeps serving.
    """

    def __init__(self, config_dir: str):
        """
        Args:
            config_dir: Directory holding <page>.json files. Created lazily on first write.
        """
        self.config_dir = Path(config_dir)

    def path_for(self, page_key: PageKey) -> Path:
        return self.config_dir / page_key.filename

    async def _run_io(self, func, *args):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, func, *args)

    def _read_file(self, filepath: Path) -> Any:
        """Read and parse a JSON file."""
        try:
            with open(filepath, "r", encoding="utf-8") as f:
                raw = f.read()
        except FileNotFoundError as e:
            raise ConfigNotFoundError(f"Config file not found: {filepath}") from e
        except OSError as e:
            raise ConfigIOError(f"Failed to read {filepath}: {e}") from e

        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise ConfigParseError(f"Invalid JSON in {filepath}: {e}") from e

    def _write_file(self, filepath: Path, data: Any) -> None:
        """Serialize data as pretty JSON and overwrite the file."""
        try:
            payload = json.dumps(data, indent=2, ensure_ascii=False, allow_nan=False)
        except ValueError as e:
            raise ConfigParseError(f"Refusing to write non-JSON value to {filepath}: {e}") from e
        try:
            filepath.parent.mkdir(parents=True, exist_ok=True)
            with open(filepath, "w", encoding="utf-8") as f:
                f.write(payload)
        except OSError as e:
            raise ConfigIOError(f"Failed to write {filepath}: {e}") from e

    async def read(self, page_key: PageKey) -> Any:
        return await self._run_io(self._read_file, self.path_for(page_key))

    async def write(self, page_key: PageKey, document: Any, message: Optional[str] = None) -> None:
        # message only matters to stores that keep history
        filepath = self.path_for(page_key)
        await self._run_io(self._write_file, filepath, document)
        logger.info("Wrote %s config to %s", page_key.value, filepath)
