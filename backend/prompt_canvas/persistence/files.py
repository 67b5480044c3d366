"""
Single-sheet export/import file handling.

Malformed input raises MalformedImportError before anything is touched.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Tuple, Union
import json
import logging

from pydantic import ValidationError

from prompt_canvas.graph.errors import MalformedImportError
from prompt_canvas.graph.types import Edge, Node, Sheet
from prompt_canvas.persistence.codec import (
    edge_from_dict,
    edge_to_dict,
    node_from_dict,
    node_to_dict,
    normalize_branches,
)
from prompt_canvas.schemas import SheetExportPayload

logger = logging.getLogger(__name__)


def build_sheet_export(sheet: Sheet) -> Dict[str, Any]:
    return {
        "nodes": [node_to_dict(n) for n in sheet.nodes],
        "edges": [edge_to_dict(e) for e in sheet.edges],
        "exportedAt": datetime.now(timezone.utc).isoformat(),
    }


def dump_sheet_export(sheet: Sheet) -> str:
    return json.dumps(build_sheet_export(sheet), indent=2)


def parse_sheet_export(payload: Union[str, bytes, Dict[str, Any]]) -> Tuple[List[Node], List[Edge]]:
    """Decode an export file (text or already-parsed JSON) into nodes and edges."""
    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except ValueError as e:
            raise MalformedImportError(f"Invalid JSON file: {e}") from e

    if not isinstance(payload, dict):
        raise MalformedImportError("Import file must be a JSON object with nodes and edges")

    try:
        parsed = SheetExportPayload.model_validate(payload)
    except ValidationError as e:
        raise MalformedImportError(f"Import file is missing nodes/edges or has bad entries: {e}") from e

    try:
        nodes = [node_from_dict(n.model_dump()) for n in parsed.nodes]
        edges = [edge_from_dict(e.model_dump()) for e in parsed.edges]
    except (KeyError, TypeError, ValueError) as e:
        raise MalformedImportError(f"Import file has invalid node or edge data: {e}") from e

    switched_off = normalize_branches(edges)
    if switched_off:
        logger.info("Import had several active edges into one target; deactivated %s", switched_off)

    return nodes, edges
