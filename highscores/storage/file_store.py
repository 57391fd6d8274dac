from datetime import date
from pathlib import Path
from typing import List, Optional, Union

import aiofiles
import aiofiles.os

from ..engine.dates import parse_date
from ..logger import get_logger
from .base import SnapshotStore

logger = get_logger()


class FileSnapshotStore(SnapshotStore):
    """JSON files under a data directory: daily/<date>.json, all-time.json,
    users.json and double-credit-days.json
    """

    name = 'file'

    def __init__(self, data_dir: Union[str, Path]):
        self.root = Path(data_dir)

    def _path(self, key: str) -> Path:
        return self.root / f"{key}.json"

    async def _get(self, key: str) -> Optional[str]:
        try:
            async with aiofiles.open(self._path(key), 'r', encoding='utf-8') as f:
                return await f.read()
        except FileNotFoundError:
            return None
        except UnicodeDecodeError as e:
            logger.warning(f"Ignoring {key}, file is not valid UTF-8: {e}")
            return None

    async def _put(self, key: str, text: str):
        path = self._path(key)
        await aiofiles.os.makedirs(path.parent, exist_ok=True)
        tmp = path.with_name(path.name + '.tmp')
        async with aiofiles.open(tmp, 'w', encoding='utf-8') as f:
            await f.write(text)
        await aiofiles.os.replace(tmp, path)

    async def list_snapshot_dates(self) -> List[date]:
        try:
            names = await aiofiles.os.listdir(self.root / 'daily')
        except FileNotFoundError:
            return []

        days = []
        for name in names:
            if not name.endswith('.json'):
                continue
            try:
                days.append(parse_date(name[:-len('.json')]))
            except ValueError:
                logger.warning(f"Skipping unexpected file in daily directory: {name}")
        return sorted(days)
