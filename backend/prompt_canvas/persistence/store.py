"""
Key-value stores for whole-workspace snapshots.

Only whole snapshots are written; last write wins.
"""

from abc import ABC, abstractmethod
from typing import Dict, Optional
import json
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from prompt_canvas.db.models import KeyValueSnapshot
from prompt_canvas.workspace import Workspace

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    def set(self, key: str, value: str):
        pass


class InMemoryStore(KeyValueStore):

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str):
        self._data[key] = value


class SqlKeyValueStore(KeyValueStore):
    """Snapshots in the kv_snapshots table, one row per key."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def get(self, key: str) -> Optional[str]:
        with self.session_factory() as session:
            row = session.get(KeyValueSnapshot, key)
            return row.value if row else None

    def set(self, key: str, value: str):
        with self.session_factory() as session:
            row = session.get(KeyValueSnapshot, key)
            if row is None:
                session.add(KeyValueSnapshot(key=key, value=value))
            else:
                row.value = value
            session.commit()


# ------------------------------------------------------------------ #
# Workspace snapshots
# ------------------------------------------------------------------ #

def load_workspace(store: KeyValueStore, key: str) -> Workspace:
    """Read the stored workspace, falling back to the default one."""
    try:
        saved = store.get(key)
    except SQLAlchemyError as e:
        logger.warning("Failed to read snapshot '%s': %s", key, e)
        return Workspace.default()

    if not saved:
        return Workspace.default()

    try:
        return Workspace.from_snapshot(json.loads(saved))
    except (KeyError, TypeError, ValueError) as e:
        logger.warning("Failed to load snapshot '%s': %s", key, e)
        return Workspace.default()


def save_workspace(store: KeyValueStore, workspace: Workspace, key: str) -> bool:
    try:
        store.set(key, json.dumps(workspace.to_snapshot()))
    except SQLAlchemyError as e:
        logger.warning("Failed to save snapshot '%s': %s", key, e)
        return False
    return True
