from prompt_canvas.routing.path_router import CurveDescriptor, CurveKind, Facing, RouterConfig, route

__all__ = ["CurveDescriptor", "CurveKind", "Facing", "RouterConfig", "route"]
