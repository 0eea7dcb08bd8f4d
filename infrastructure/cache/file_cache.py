import json
import os
import tempfile
from datetime import UTC, datetime, timedelta
from pathlib import Path

from domain.exceptions.currency import CacheReadError, CacheWriteError


class FileKeyValueStore:
    """String key-value store persisted to a single JSON file.

    Each entry carries its own expiry; expired entries read as missing and
    are dropped on the next write.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _load(self) -> dict:
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            return {}
        except OSError as e:
            raise CacheReadError(f'Cannot read cache file {self.path}: {e}') from e

        try:
            entries = json.loads(raw.decode('utf-8'))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise CacheReadError(f'Invalid json data in {self.path}') from e
        if not isinstance(entries, dict):
            raise CacheReadError(f'Invalid cache file layout in {self.path}')
        return entries

    @staticmethod
    def _is_live(entry: dict, now: datetime) -> bool:
        try:
            return datetime.fromisoformat(entry['expires_at']) > now
        except (KeyError, TypeError, ValueError):
            return False

    async def get(self, key: str) -> str | None:
        entry = self._load().get(key)
        if not isinstance(entry, dict) or not self._is_live(entry, datetime.now(UTC)):
            return None
        value = entry.get('value')
        return value if isinstance(value, str) else None

    async def set(self, key: str, value: str, ttl: timedelta) -> None:
        now = datetime.now(UTC)
        try:
            entries = self._load()
        except CacheReadError:
            entries = {}
        entries = {k: v for k, v in entries.items() if isinstance(v, dict) and self._is_live(v, now)}
        entries[key] = {'value': value, 'expires_at': (now + ttl).isoformat()}

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f'.{self.path.name}.')
            with os.fdopen(fd, 'w', encoding='utf-8') as tmp:
                json.dump(entries, tmp)
            os.replace(tmp_name, self.path)
        except OSError as e:
            raise CacheWriteError(f'Cannot write cache file {self.path}: {e}') from e

    async def close(self) -> None:
        pass
