from functools import lru_cache
import logging

from prompt_canvas.config import STORAGE_KEY, load_router_config
from prompt_canvas.db.session import SessionLocal
from prompt_canvas.grouping.attachments import sync_attached_images
from prompt_canvas.persistence.store import (
    KeyValueStore,
    SqlKeyValueStore,
    load_workspace,
    save_workspace,
)

logger = logging.getLogger(__name__)


class CanvasState:
    """
    The single in-process workspace the HTTP host edits.

    Every mutating request ends with commit(), which re-snaps attached images
    and writes the whole snapshot to the store.
    """

    def __init__(self, store: KeyValueStore, key: str = STORAGE_KEY):
        self.store = store
        self.key = key
        self.workspace = load_workspace(store, key)
        self.router_config = load_router_config()

    def commit(self):
        moved = sync_attached_images(self.workspace.active_sheet)
        if moved:
            logger.debug("Re-anchored images: %s", moved)
        save_workspace(self.store, self.workspace, self.key)


@lru_cache(maxsize=1)
def get_state() -> CanvasState:
    return CanvasState(SqlKeyValueStore(SessionLocal))
