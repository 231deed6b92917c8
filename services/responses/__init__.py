"""Context-aware response core.

This package contains:
- route-context classification (`context.py`)
- strategy selection (`strategies.py`)
- sanitization policy (`sanitization.py`)
- renderers and their registry (`renderers.py`)
- the dispatcher and exception mapping (`dispatcher.py`)

Nothing here imports Flask; host collaborators arrive through `RenderPorts`.
"""

from services.responses.context import RouteContext, RouteContextClassifier, accepts_json, glob_match
from services.responses.dispatcher import STATUS_DISPATCH, ResponseDispatcher
from services.responses.envelope import ResponseEnvelope
from services.responses.renderers import RenderPorts, register_renderer, render
from services.responses.sanitization import (
    GENERIC_ERROR_MESSAGE,
    SanitizationConfig,
    SanitizedPayload,
    filter_error_fields,
    sanitize,
)
from services.responses.strategies import StrategyKind, select_strategy

__all__ = [
    "GENERIC_ERROR_MESSAGE",
    "STATUS_DISPATCH",
    "RenderPorts",
    "ResponseDispatcher",
    "ResponseEnvelope",
    "RouteContext",
    "RouteContextClassifier",
    "SanitizationConfig",
    "SanitizedPayload",
    "StrategyKind",
    "accepts_json",
    "filter_error_fields",
    "glob_match",
    "register_renderer",
    "render",
    "sanitize",
    "select_strategy",
]
