from prompt_canvas.template.engine import (
    TEMPLATE_PRESETS,
    extract_parameters,
    preview,
    render,
)

__all__ = ["TEMPLATE_PRESETS", "extract_parameters", "preview", "render"]
