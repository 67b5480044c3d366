from prompt_canvas.layout.engine import LayoutConfig, LayoutResult, auto_layout

__all__ = ["LayoutConfig", "LayoutResult", "auto_layout"]
