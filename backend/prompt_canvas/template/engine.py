"""
Template Engine - {{parameter}} extraction and substitution

Pure functions, no graph access. Placeholders are ``{{identifier}}`` where
identifier is ``\\w+``.
"""

from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional
import re


PLACEHOLDER_PATTERN = re.compile(r"\{\{(\w+)\}\}")


@dataclass(frozen=True)
class TemplatePreset:
    name: str
    template: str


TEMPLATE_PRESETS: List[TemplatePreset] = [
    TemplatePreset(
        "Image Reference",
        "Take the first image on Row {{row}} Column {{column}} - {{description}}",
    ),
    TemplatePreset(
        "Character Description",
        "A {{age}} year old {{gender}} with {{hair_color}} hair and "
        "{{eye_color}} eyes, wearing {{clothing}}",
    ),
    TemplatePreset(
        "Scene Setup",
        "{{time_of_day}} in {{location}}, the atmosphere is {{mood}}, "
        "with {{weather}} weather",
    ),
    TemplatePreset(
        "Action Prompt",
        "{{subject}} is {{action}} while {{secondary_action}}, in the style of {{style}}",
    ),
    TemplatePreset("Custom", ""),
]

DEFAULT_TEMPLATE = TEMPLATE_PRESETS[0].template


def extract_parameters(template: str) -> List[str]:
    """Distinct placeholder names, in order of first occurrence."""
    params: List[str] = []
    for match in PLACEHOLDER_PATTERN.finditer(template or ""):
        name = match.group(1)
        if name not in params:
            params.append(name)
    return params


def _filled(values: Optional[Mapping[str, str]], name: str) -> Optional[str]:
    value = (values or {}).get(name)
    if isinstance(value, str) and value:
        return value
    return None


def render(template: str, values: Optional[Mapping[str, str]] = None) -> str:
    """
    Substitute every placeholder.

    Missing or empty values degrade to the bare parameter name, never to the
    original ``{{name}}`` token.
    """
    return PLACEHOLDER_PATTERN.sub(
        lambda m: _filled(values, m.group(1)) or m.group(1),
        template or "",
    )


def preview(template: str, values: Optional[Mapping[str, str]] = None) -> str:
    """Authoring preview: unfilled placeholders stay visible as ``{{name}}``."""
    return PLACEHOLDER_PATTERN.sub(
        lambda m: _filled(values, m.group(1)) or m.group(0),
        template or "",
    )


def prune_values(template: str, values: Optional[Mapping[str, str]]) -> Dict[str, str]:
    """Drop values whose key is no longer a placeholder of *template*."""
    params = set(extract_parameters(template))
    return {k: v for k, v in (values or {}).items() if k in params}


def get_preset(name: str) -> Optional[TemplatePreset]:
    return next((p for p in TEMPLATE_PRESETS if p.name == name), None)
