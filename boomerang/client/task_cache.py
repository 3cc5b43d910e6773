"""
Last-known-good snapshot of pending tasks for offline continuity.
"""
import json
import logging
import os
from pathlib import Path

from boomerang.services.errors import NotFound

logger = logging.getLogger(__name__)

TASK_CACHE_PATH = os.getenv("TASK_CACHE_PATH", os.path.expanduser("~/.boomerang/cached_tasks.json"))


class CacheMiss(NotFound):
    kind = "CacheMiss"


class TaskCache:
    def __init__(self, path: str | Path = TASK_CACHE_PATH):
        self.path = Path(path)

    def save(self, tasks: list[dict]) -> None:
        """Replace the snapshot. Written to a temp file first so a crash never leaves half a file."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps({"tasks": tasks}), encoding="utf-8")
        os.replace(tmp, self.path)
        logger.debug(f"Cached {len(tasks)} tasks")

    def load(self) -> list[dict]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError as e:
            raise CacheMiss("No cached tasks found") from e
        except (OSError, ValueError) as e:
            raise CacheMiss(f"Cached tasks unreadable: {e}") from e

        tasks = data.get("tasks") if isinstance(data, dict) else None
        if not isinstance(tasks, list):
            raise CacheMiss("Cached tasks malformed")
        logger.debug(f"Loaded {len(tasks)} cached tasks")
        return tasks
