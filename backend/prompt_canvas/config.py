import os
from dotenv import load_dotenv

from prompt_canvas.routing.path_router import RouterConfig

# Load .env from project root
load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./prompt_canvas.db")
STORAGE_KEY = os.getenv("STORAGE_KEY", "prompt-canvas-sheets")
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",") if o.strip()]
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# env var -> RouterConfig field
_ROUTER_OVERRIDES = {
    "ROUTER_CLOSE_DISTANCE": "close_distance",
    "ROUTER_SAME_LEVEL_DY": "same_level_dy",
    "ROUTER_ARC_MIN": "arc_height_min",
    "ROUTER_SIDE_MIN": "side_offset_min",
    "ROUTER_SIDE_MAX": "side_offset_max",
    "ROUTER_CURVATURE_MAX": "curvature_max",
}


def load_router_config() -> RouterConfig:
    config = RouterConfig()
    for env_name, field_name in _ROUTER_OVERRIDES.items():
        raw = os.getenv(env_name)
        if raw:
            setattr(config, field_name, float(raw))
    return config
