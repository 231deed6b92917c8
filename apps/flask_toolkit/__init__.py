"""Flask integration for the context-aware response toolkit.

This package contains:
- the extension (`extension.py`): ``Toolkit`` / ``get_toolkit``
- Flask adapters for the response-core collaborators (`adapters.py`)
- view facades (`responses.py`, `route_helper.py`, `pagination.py`)
- hooks and decorators (`middleware.py`) and payload validation (`validation.py`)
"""

from apps.flask_toolkit.extension import Toolkit, ToolkitState, get_toolkit
from apps.flask_toolkit.middleware import (
    exclude_from_history,
    force_api_response,
    force_json_response,
    json_response,
)
from apps.flask_toolkit.validation import validate_payload, validated_body

__all__ = [
    "Toolkit",
    "ToolkitState",
    "exclude_from_history",
    "force_api_response",
    "force_json_response",
    "get_toolkit",
    "json_response",
    "validate_payload",
    "validated_body",
]
