"""Toolkit version constants.

Exposed by the CLI (``--version``) and attached to JSON log records so log
lines can be traced back to a specific toolkit release.
"""

TOOLKIT_NAME: str = "flask-context-toolkit"
TOOLKIT_VERSION: str = "0.1.0"
