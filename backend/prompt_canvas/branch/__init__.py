from prompt_canvas.branch.resolver import active_path, compute_active_path_text, set_active

__all__ = ["active_path", "compute_active_path_text", "set_active"]
