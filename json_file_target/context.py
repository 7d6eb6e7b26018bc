"""ContextProvider: per-flush metadata merged into every exported record."""

import logging
import os
import sys
from collections.abc import Mapping
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

_MISSING = object()


def _lookup(source, path: list[str]):
    value = source
    for key in path:
        if not isinstance(value, Mapping) or key not in value:
            return _MISSING
        value = value[key]
    return value


def _copy_tree(value):
    if isinstance(value, Mapping):
        return {k: _copy_tree(v) for k, v in value.items()}
    return value


def filter_vars(source: Mapping, names) -> dict:
    """Pick the allow-listed variables out of source.

    Names may be dotted paths ("request.headers.host"); the nesting is kept
    in the result. A name prefixed with "!" removes that path again, so
    ["request", "!request.cookies"] keeps everything but the cookies.
    """
    result: dict = {}
    excludes = []

    for name in names:
        if name.startswith("!"):
            excludes.append(name[1:].split("."))
            continue
        path = name.split(".")
        value = _lookup(source, path)
        if value is _MISSING:
            continue
        node = result
        for key in path[:-1]:
            node = node.setdefault(key, {})
        node[path[-1]] = _copy_tree(value)

    for path in excludes:
        node = _lookup(result, path[:-1])
        if isinstance(node, dict):
            node.pop(path[-1], None)

    return result


def process_variables() -> dict:
    """Process-wide variables that log_vars can select from."""
    return {"env": dict(os.environ), "argv": list(sys.argv), "pid": os.getpid()}


class ContextProvider:
    """Supplies the application id, the current user id and a filtered
    snapshot of selected variables.

    user_resolver is optional: without one the "userId" key is left out
    entirely. A resolver may return None (anonymous user), which is kept.
    variables may be a mapping or a zero-argument callable returning one,
    evaluated on every call.
    """

    def __init__(
        self,
        application: str,
        user_resolver: Optional[Callable[[], Any]] = None,
        variables=None,
        log_vars=(),
    ):
        self._application = application
        self._user_resolver = user_resolver
        self._variables = variables if variables is not None else {}
        self._log_vars = list(log_vars)

    @property
    def application(self) -> str:
        return self._application

    def _snapshot(self) -> Mapping:
        if callable(self._variables):
            return self._variables()
        return self._variables

    def get_context(self) -> dict:
        context: dict = {"application": self._application}

        if self._user_resolver is not None:
            try:
                context["userId"] = self._user_resolver()
            except Exception as exc:
                logger.debug("User id unavailable: %s", exc)

        context["context"] = filter_vars(self._snapshot(), self._log_vars)
        return context
