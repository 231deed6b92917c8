"""
flask-context-toolkit CLI.

Usage
-----
toolkit show-config
toolkit publish-config --out .env.toolkit
toolkit classify /api/users --method POST
toolkit classify /dashboard --accept application/json
"""

from __future__ import annotations

import argparse
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from infra.config import ENV_KEYS, Settings
from services.responses.context import RouteContextClassifier
from services.responses.dispatcher import ResponseDispatcher
from services.responses.renderers import RenderPorts
from services.responses.sanitization import SanitizationConfig
from version import TOOLKIT_NAME, TOOLKIT_VERSION


@dataclass
class SyntheticRequest:
    """Request stand-in for classifying a path outside a running app."""

    path: str
    method: str = "GET"
    headers: dict[str, str] = field(default_factory=dict)
    endpoint: str | None = None


def _load_settings(args: argparse.Namespace) -> Settings:
    return Settings.from_env(env_file=args.env_file)


def _env_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(str(item) for item in value)
    return str(value)


def render_env_template(settings: Settings) -> str:
    """Return a `.env` document listing every toolkit key with its current value."""
    dumped = settings.model_dump()
    lines: list[str] = ["# flask-context-toolkit settings", ""]
    for section, fields in ENV_KEYS.items():
        lines.append(f"# [{section}]")
        for field_name, keys in fields.items():
            aliases = ", ".join(keys[1:])
            if aliases:
                lines.append(f"# aliases: {aliases}")
            lines.append(f"{keys[0]}={_env_value(dumped[section][field_name])}")
        lines.append("")
    return "\n".join(lines)


def cmd_show_config(args: argparse.Namespace) -> None:
    settings = _load_settings(args)
    print(json.dumps(settings.model_dump(), indent=2, sort_keys=True))


def cmd_publish_config(args: argparse.Namespace) -> None:
    out = Path(args.out)
    if out.exists() and not args.force:
        raise SystemExit(f"{out} already exists (use --force to overwrite).")
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(render_env_template(_load_settings(args)), encoding="utf-8")
    print(f"Wrote {out}")


def cmd_classify(args: argparse.Namespace) -> None:
    settings = _load_settings(args)
    headers: dict[str, str] = {}
    if args.accept:
        headers["Accept"] = args.accept
    if args.xhr:
        headers["X-Requested-With"] = "XMLHttpRequest"
    request = SyntheticRequest(path=args.path, method=args.method.upper(), headers=headers)

    classifier = RouteContextClassifier(settings.route.matchers())
    dispatcher = ResponseDispatcher(classifier, SanitizationConfig(), RenderPorts())
    context = classifier.classify(request)
    wants_json = classifier.wants_json(request)
    data = {
        "path": request.path,
        "method": request.method,
        "context": context.value,
        "wants_json": wants_json,
        "strategy": dispatcher.select(request).value,
    }
    print(dispatcher.success("Route classified", data, console=True))


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="toolkit", description="flask-context-toolkit CLI")
    p.add_argument("--version", action="version", version=f"{TOOLKIT_NAME} {TOOLKIT_VERSION}")
    p.add_argument("--env-file", default=".env", help="Path of the .env file to read. Default: .env")
    sub = p.add_subparsers(dest="cmd", required=True)

    sp = sub.add_parser("show-config", help="Print resolved settings as JSON.")
    sp.set_defaults(func=cmd_show_config)

    sp = sub.add_parser("publish-config", help="Write a .env template of every toolkit key.")
    sp.add_argument("--out", default=".env.toolkit", help="Output file. Default: .env.toolkit")
    sp.add_argument("--force", action="store_true", help="Overwrite an existing file.")
    sp.set_defaults(func=cmd_publish_config)

    sp = sub.add_parser("classify", help="Classify a request path with the configured matchers.")
    sp.add_argument("path", help="Request path, for example /api/users")
    sp.add_argument("--method", default="GET", help="HTTP method. Default: GET")
    sp.add_argument("--accept", default=None, help="Accept header value.")
    sp.add_argument("--xhr", action="store_true", help="Send X-Requested-With: XMLHttpRequest.")
    sp.set_defaults(func=cmd_classify)

    return p


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
