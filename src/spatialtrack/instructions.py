"""System instruction injected ahead of every generation request.

``{{user}}`` and ``{{char}}`` are host macros, substituted by the host
before the prompt reaches the model.
"""

from __future__ import annotations

from spatialtrack.config import EngineConfig

_TEMPLATE = """
[SYSTEM: SPATIAL TRACKING ACTIVE]
You must maintain a spatial tracking system for this scene.
{{{{user}}}} is at coordinates (0,0).
Analyze the scene and determine the coordinates (X, Y) and a short "Status" for every other character present relative to {{{{user}}}}.
- X: Horizontal distance (negative = left, positive = right).
- Y: Forward distance (negative = behind, positive = in front).
Keep every coordinate between -{limit} and {limit}.

Output the result strictly as a valid JSON object wrapped in {open_tag} tags at the very end of your response.
Format:
{open_tag}
{{
  "characters": [
    {{ "name": "{{{{char}}}}", "x": 5, "y": 10, "status": "Walking towards user" }}
  ]
}}
{close_tag}
Ensure valid JSON. Do not output this text outside the tags.
"""


def _format_limit(limit: float) -> str:
    return str(int(limit)) if float(limit).is_integer() else str(limit)


def build_system_instruction(config: EngineConfig | None = None) -> str:
    """Render the tracking instruction for the configured markers and bounds."""
    config = config or EngineConfig()
    return _TEMPLATE.format(
        open_tag=config.open_tag,
        close_tag=config.close_tag,
        limit=_format_limit(config.coordinate_limit),
    )
