"""
Workspace - the set of sheets and which one is active.

Exactly one sheet is active; switching swaps the whole graph the host edits.
"""

from typing import Any, Dict, List, Optional, Union
import logging
import random

from prompt_canvas.graph.errors import SheetNotFoundError
from prompt_canvas.graph.model import GraphModel, welcome_node
from prompt_canvas.graph.types import Sheet, new_id
from prompt_canvas.persistence.codec import sheet_from_dict, sheet_to_dict
from prompt_canvas.persistence.files import build_sheet_export, parse_sheet_export
from prompt_canvas.schemas import WorkspaceSnapshot

logger = logging.getLogger(__name__)


class Workspace:

    def __init__(self, sheets: List[Sheet], active_sheet_id: Optional[str] = None,
                 rng: Optional[random.Random] = None):
        if not sheets:
            raise ValueError("A workspace needs at least one sheet")
        self.sheets = sheets
        self.active_sheet_id = active_sheet_id
        if self.get_sheet(active_sheet_id) is None:
            self.active_sheet_id = sheets[0].id
        self.rng = rng or random.Random()

    @classmethod
    def default(cls) -> "Workspace":
        sheet = Sheet(id="sheet-1", name="Sheet 1", nodes=[welcome_node()])
        return cls([sheet], sheet.id)

    # ---------- sheets ----------

    def get_sheet(self, sheet_id: Optional[str]) -> Optional[Sheet]:
        return next((s for s in self.sheets if s.id == sheet_id), None)

    def require_sheet(self, sheet_id: str) -> Sheet:
        sheet = self.get_sheet(sheet_id)
        if sheet is None:
            raise SheetNotFoundError(sheet_id)
        return sheet

    @property
    def active_sheet(self) -> Sheet:
        return self.require_sheet(self.active_sheet_id)

    def model(self) -> GraphModel:
        return GraphModel(self.active_sheet, self.rng)

    def add_sheet(self, name: Optional[str] = None) -> Sheet:
        sheet = Sheet(id=f"sheet-{new_id()}", name=name or f"Sheet {len(self.sheets) + 1}")
        self.sheets.append(sheet)
        self.active_sheet_id = sheet.id
        return sheet

    def delete_sheet(self, sheet_id: str) -> bool:
        if len(self.sheets) <= 1 or self.get_sheet(sheet_id) is None:
            return False
        self.sheets = [s for s in self.sheets if s.id != sheet_id]
        if self.active_sheet_id == sheet_id:
            self.active_sheet_id = self.sheets[0].id
        return True

    def rename_sheet(self, sheet_id: str, name: str) -> Sheet:
        sheet = self.require_sheet(sheet_id)
        sheet.name = name
        return sheet

    def switch_sheet(self, sheet_id: str) -> Sheet:
        sheet = self.require_sheet(sheet_id)
        self.active_sheet_id = sheet.id
        return sheet

    def clear_sheet(self):
        self.model().clear()

    # ---------- import / export ----------

    def export_sheet(self) -> Dict[str, Any]:
        return build_sheet_export(self.active_sheet)

    def import_sheet(self, payload: Union[str, bytes, Dict[str, Any]]) -> Sheet:
        """Replace the active sheet's graph; raises MalformedImportError and leaves it untouched."""
        nodes, edges = parse_sheet_export(payload)
        sheet = self.active_sheet
        sheet.nodes, sheet.edges = nodes, edges
        logger.info("Imported %d nodes and %d edges into sheet %s", len(nodes), len(edges), sheet.id)
        return sheet

    # ---------- snapshots ----------

    def to_snapshot(self) -> Dict[str, Any]:
        return {
            "sheets": [sheet_to_dict(s) for s in self.sheets],
            "activeSheetId": self.active_sheet_id,
        }

    @classmethod
    def from_snapshot(cls, raw: Dict[str, Any]) -> "Workspace":
        snapshot = WorkspaceSnapshot.model_validate(raw)
        if not snapshot.sheets:
            raise ValueError("Snapshot has no sheets")
        sheets = [sheet_from_dict(s.model_dump()) for s in snapshot.sheets]
        return cls(sheets, snapshot.activeSheetId)
