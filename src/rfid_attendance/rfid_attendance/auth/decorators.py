from __future__ import annotations

from dataclasses import dataclass
from functools import wraps
from typing import Callable, Optional

from flask import g, request

from ..common.http import request_value
from ..core.constants import SESSION_COOKIE_NAME, SESSION_HEADER_NAME
from .model import AccessDecision, Capability, CurrentUser


def session_token() -> Optional[str]:
    return request.headers.get(SESSION_HEADER_NAME) or request.cookies.get(SESSION_COOKIE_NAME)


def current_user() -> CurrentUser:
    return g.current_user


def current_access() -> AccessDecision:
    return g.access


def _class_name_from_request(view_kwargs: dict) -> Optional[str]:
    return view_kwargs.get("class_name") or request_value("className")


@dataclass(frozen=True)
class Guards:
    login_required: Callable
    admin_required: Callable
    class_teacher_required: Callable
    class_access_required: Callable
    attendance_marker_required: Callable


def build_guards(container) -> Guards:
    """Route decorators: authenticate the session token, then authorize.

    Failures raise AuthenticationError / AuthorizationError, which the app-level
    error handlers turn into 401 / 403 before the view runs.
    """

    def _authenticate() -> CurrentUser:
        user = container.auth_service.authenticate(session_token())
        g.current_user = user
        return user

    def login_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            _authenticate()
            return view(*args, **kwargs)

        return wrapper

    def requires(make_capability: Callable[[dict], Capability]):
        def decorator(view):
            @wraps(view)
            def wrapper(*args, **kwargs):
                user = _authenticate()
                g.access = container.access_guard.authorize(user, make_capability(kwargs))
                return view(*args, **kwargs)

            return wrapper

        return decorator

    return Guards(
        login_required=login_required,
        admin_required=requires(lambda _kw: Capability.admin_only()),
        class_teacher_required=requires(lambda _kw: Capability.class_teacher_role()),
        class_access_required=requires(lambda kw: Capability.has_class_access(_class_name_from_request(kw) or "")),
        attendance_marker_required=requires(lambda kw: Capability.can_mark_attendance(_class_name_from_request(kw))),
    )
