"""Flask extension wiring the response core into an application.

Usage:
    app = Flask(__name__)
    Toolkit(app)

    # or, with an application factory
    toolkit = Toolkit()
    toolkit.init_app(app)

Per-application state (settings, classifier, dispatcher, pagination) lives in
``app.extensions["toolkit"]`` as a ``ToolkitState``; ``get_toolkit()`` returns
it for the current (or given) application.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from flask import Flask, Response, current_app, has_app_context, has_request_context, request
from werkzeug.exceptions import HTTPException

from apps.flask_toolkit.adapters import (
    ClickConsoleProbe,
    FlaskJsonResponder,
    FlaskRedirector,
    FlaskRequestResolver,
    FlaskUrlProvider,
)
from apps.flask_toolkit.middleware import remember_previous_url
from contracts.errors import ConfigurationError, HttpError
from contracts.interfaces import ConsoleProbeProtocol, RequestProtocol, RequestResolverProtocol
from infra.config import Settings, ValidationError, get_settings
from infra.logging_config import StructuredLogger, clear_request_context, set_request_context, setup_logging
from services.pagination.strategy import DefaultPaginationStrategy, PaginationStrategy
from services.responses.context import RouteContextClassifier
from services.responses.dispatcher import STATUS_DISPATCH, ResponseDispatcher, effective_status
from services.responses.renderers import RenderPorts, missing_renderers
from services.responses.sanitization import SanitizationConfig

EXTENSION_KEY = "toolkit"
CONFIG_KEY = "TOOLKIT"

logger = StructuredLogger(__name__)


@dataclass(frozen=True)
class ToolkitState:
    """Everything the toolkit needs to serve one application."""

    settings: Settings
    classifier: RouteContextClassifier
    sanitization: SanitizationConfig
    dispatcher: ResponseDispatcher
    pagination: PaginationStrategy
    request_resolver: RequestResolverProtocol
    console_probe: ConsoleProbeProtocol
    url_provider: FlaskUrlProvider

    def current_request(self) -> RequestProtocol | None:
        return self.request_resolver.resolve()

    def running_in_console(self) -> bool:
        return self.console_probe.running_in_console()


def resolve_settings(app: Flask, settings: Settings | None = None) -> Settings:
    """Explicit settings, else environment settings overlaid with ``app.config["TOOLKIT"]``.

    Raises:
        ConfigurationError: If the overlay does not validate
    """
    base = settings if settings is not None else get_settings()
    overrides = app.config.get(CONFIG_KEY)
    if overrides is not None and not isinstance(overrides, Mapping):
        raise ConfigurationError(f"app.config[{CONFIG_KEY!r}] must be a mapping")
    try:
        return base.with_overrides(overrides)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid toolkit configuration: {exc}") from exc


def build_state(app: Flask, settings: Settings) -> ToolkitState:
    include_debug = settings.responses.include_debug_details
    if include_debug is None:
        include_debug = bool(app.debug)

    classifier = RouteContextClassifier(settings.route.matchers())
    sanitization = SanitizationConfig.build(
        include_debug_details=include_debug,
        redirect_allowed_headers=settings.responses.redirect_allowed_headers,
        redirect_allowed_error_fields=settings.responses.redirect_allowed_error_fields,
    )
    url_provider = FlaskUrlProvider()
    ports = RenderPorts(
        url_provider=url_provider,
        redirector=FlaskRedirector(),
        json_responder=FlaskJsonResponder(),
    )
    return ToolkitState(
        settings=settings,
        classifier=classifier,
        sanitization=sanitization,
        dispatcher=ResponseDispatcher(classifier, sanitization, ports),
        pagination=DefaultPaginationStrategy(settings.paginator.page_items),
        request_resolver=FlaskRequestResolver(),
        console_probe=ClickConsoleProbe(settings.route.console_mode),
        url_provider=url_provider,
    )


def validate_state(state: ToolkitState) -> None:
    """Fail fast on configuration the dispatcher could not serve."""
    missing = missing_renderers()
    if missing:
        names = ", ".join(kind.value for kind in missing)
        raise ConfigurationError(f"No renderer registered for strategies: {names}")
    state.pagination.resolve_items_per_page()


def as_response(result: Any, status: int) -> Any:
    """Wrap console text in a response carrying ``status`` when a request is being served."""
    if isinstance(result, str) and has_request_context():
        return Response(result, status=status, mimetype="text/plain")
    return result


class Toolkit:
    """Flask extension entry point."""

    def __init__(
        self,
        app: Flask | None = None,
        settings: Settings | None = None,
        *,
        configure_logging: bool = False,
    ) -> None:
        self.settings = settings
        self.configure_logging = configure_logging
        if app is not None:
            self.init_app(app)

    def init_app(self, app: Flask) -> ToolkitState:
        settings = resolve_settings(app, self.settings)
        if self.configure_logging:
            setup_logging(
                level=settings.logging.level,
                json_logs=settings.logging.json_logs,
                override_root_handlers=settings.logging.override_root_handlers,
            )

        state = build_state(app, settings)
        validate_state(state)
        app.extensions[EXTENSION_KEY] = state

        app.register_error_handler(HttpError, _handle_http_error)
        app.register_error_handler(HTTPException, _handle_werkzeug_exception)
        app.register_error_handler(Exception, _handle_unexpected_exception)
        app.before_request(_bind_request_log_context)
        app.after_request(remember_previous_url)
        app.teardown_request(_clear_request_log_context)

        logger.info(
            "toolkit_initialized",
            app_name=app.name,
            console_mode=settings.route.console_mode,
            include_debug_details=state.sanitization.include_debug_details,
            page_items=settings.paginator.page_items,
        )
        return state


def get_toolkit(app: Flask | None = None) -> ToolkitState:
    """Return the toolkit state bound to ``app`` (default: the current app).

    Raises:
        ConfigurationError: If the toolkit was not initialized for the app
    """
    if app is None:
        if not has_app_context():
            raise ConfigurationError("No Flask application context; pass the app explicitly")
        app = current_app._get_current_object()
    state = app.extensions.get(EXTENSION_KEY)
    if state is None:
        raise ConfigurationError("Toolkit is not initialized for this application; call Toolkit.init_app(app)")
    return state


def _dispatch_exception(exc: BaseException, errors: Mapping[str, Any] | None = None) -> Any:
    state = get_toolkit()
    result = state.dispatcher.handle_exception(
        exc,
        errors,
        request=state.current_request(),
        console=state.running_in_console(),
    )
    return as_response(result, effective_status(exc))


def _handle_http_error(exc: HttpError) -> Any:
    exc.report(logger)
    return _dispatch_exception(exc)


def _handle_werkzeug_exception(exc: HTTPException) -> Any:
    # Unmapped statuses (405, 413, 415, ...) keep Werkzeug's own response.
    if exc.code is None or exc.code not in STATUS_DISPATCH:
        return exc
    logger.info("http_error", status=exc.code, exception=type(exc).__name__, path=request.path)
    return _dispatch_exception(exc)


def _handle_unexpected_exception(exc: Exception) -> Any:
    logger.exception("unhandled_exception", exc, exception=type(exc).__name__, path=request.path)
    return _dispatch_exception(exc)


def _bind_request_log_context() -> None:
    clear_request_context()
    state = get_toolkit()
    set_request_context(
        method=request.method,
        path=request.path,
        route_context=state.classifier.classify(request, console=False).value,
    )


def _clear_request_log_context(_exc: BaseException | None = None) -> None:
    clear_request_context()
