class PromptCanvasError(Exception):
    """Base class for errors surfaced to the user."""


class MalformedImportError(PromptCanvasError):
    """Import payload could not be parsed or lacks nodes/edges."""


class SheetNotFoundError(PromptCanvasError):
    def __init__(self, sheet_id: str):
        super().__init__(f"Unknown sheet '{sheet_id}'")
        self.sheet_id = sheet_id
