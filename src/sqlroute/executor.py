"""Request execution: compiled route + HTTP request -> SQL statement -> envelope.

For one request the flow is::

    extract_params(request)          query string, then JSON body on top
    process_template(sql, ...)       {{table}}, {{columns}}, {{values}}, {{updates}}
    bind_parameters(sql, params)     named mapping or positional tuple
    store.execute(sql, bound)        QueryResult | MutationResult

and the outcome is wrapped in ``{"success": ..., "data"|"error": ...}``.
"""

import json as json_module
import logging
import re
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, TypeAlias

from sqlroute.data.store import ExecutionResult, Params, Store
from sqlroute.errors import BadRequest, ExecutionError, TemplateError
from sqlroute.http.request import Request
from sqlroute.http.response import Response, error_response, success_response
from sqlroute.routing.route import RouteDescriptor
from sqlroute.sql.files import SQLFileStore
from sqlroute.sql.template import bindable_params, process_template, unresolved_placeholders

logger = logging.getLogger("sqlroute.executor")

RouteHandler: TypeAlias = Callable[[Request], Awaitable[Response]]

_BODY_METHODS = frozenset({"POST", "PUT", "DELETE"})

_STRING_LITERAL_RE = re.compile(r"'(?:[^']|'')*'|\"(?:[^\"]|\"\")*\"")
_NAMED_PLACEHOLDER_RE = re.compile(r"(?<![:\w])[:@$][A-Za-z_]\w*")
_POSITIONAL_PLACEHOLDER_RE = re.compile(r"\?")


async def extract_params(request: Request) -> dict[str, Any]:
    """Build the parameter set for a request.

    One value per query key. For POST, PUT and DELETE a non-empty body
    must be a JSON object; its keys override the query and come first in
    the result, followed by query-only keys. Positional binding follows
    this order, so a stray query parameter never takes a body value's slot.
    """
    query = request.query.first_values()
    if request.method not in _BODY_METHODS:
        return dict(query)

    raw = await request.body()
    if not raw.strip():
        return dict(query)
    try:
        body = json_module.loads(raw)
    except ValueError as exc:
        raise BadRequest(f"Request body is not valid JSON: {exc}") from exc
    if not isinstance(body, dict):
        raise BadRequest("Request body must be a JSON object")
    params: dict[str, Any] = dict(body)
    for key, value in query.items():
        params.setdefault(key, value)
    return params


def _coerce(value: Any) -> Any:
    if isinstance(value, (dict, list)):
        return json_module.dumps(value)
    return value


def bind_parameters(sql: str, params: Mapping[str, Any]) -> Params:
    """Turn a parameter set into driver bind arguments for ``sql``.

    Template directives are dropped. If the statement uses named
    placeholders (``:id``, ``@id``, ``$id``) the rest is bound by name.
    Otherwise values are bound positionally, in parameter-set order, to
    as many ``?`` slots as the statement has. Nested JSON values are
    bound as JSON text.
    """
    bindable = {key: _coerce(value) for key, value in bindable_params(params).items()}
    code = _STRING_LITERAL_RE.sub("", sql)
    if _NAMED_PLACEHOLDER_RE.search(code):
        return bindable
    slots = len(_POSITIONAL_PLACEHOLDER_RE.findall(code))
    return tuple(bindable.values())[:slots]


class SQLExecutor:
    """Runs compiled routes against a store.

    SQL text is read through ``files`` (cached after first read), so
    edits to a file on disk take effect only after ``files.reload()``.
    """

    __slots__ = ("debug", "files", "store", "strict_templates")

    def __init__(
        self,
        store: Store,
        files: SQLFileStore,
        *,
        debug: bool = False,
        strict_templates: bool = False,
    ) -> None:
        self.store = store
        self.files = files
        self.debug = debug
        self.strict_templates = strict_templates

    def render(self, descriptor: RouteDescriptor, params: Mapping[str, Any]) -> str:
        """Load and template the route's SQL.

        Raises ``ExecutionError`` for an empty file and ``TemplateError``
        for leftover placeholders in strict mode.
        """
        try:
            sql_file = self.files.get(descriptor.sql_path)
        except OSError as exc:
            raise ExecutionError(f"failed to read SQL file {descriptor.sql_path}: {exc}") from exc
        if sql_file.is_empty():
            raise ExecutionError(f"SQL file is empty: {descriptor.sql_path}")

        sql = process_template(sql_file.content, descriptor.table_name, params)
        leftover = unresolved_placeholders(sql)
        if leftover:
            names = ", ".join(leftover)
            if self.strict_templates:
                raise TemplateError(f"unresolved placeholders in {descriptor.sql_path}: {names}")
            logger.warning("Unresolved placeholders in %s: %s", descriptor.sql_path, names)
        return sql

    async def execute(
        self,
        descriptor: RouteDescriptor,
        params: Mapping[str, Any],
    ) -> tuple[ExecutionResult, str]:
        """Execute a route. Returns the result and the SQL that ran."""
        sql = self.render(descriptor, params)
        result = await self.store.execute(sql, bind_parameters(sql, params))
        return result, sql


def debug_info(descriptor: RouteDescriptor, processed_sql: str | None) -> dict[str, Any]:
    """The ``debug`` block attached to envelopes in debug mode."""
    return {
        "method": descriptor.http_method,
        "sql_path": descriptor.sql_path,
        "is_universal": descriptor.is_universal,
        "table_name": descriptor.table_name,
        "processed_sql": processed_sql,
    }


def make_handler(
    descriptor: RouteDescriptor,
    executor: SQLExecutor,
    *,
    debug: bool | None = None,
) -> RouteHandler:
    """Build the request handler for one compiled route.

    ``OPTIONS`` gets an empty 200. Everything else runs the route's SQL:
    a malformed body is a 400, a failing statement a 500, both in the
    failure envelope. With ``debug`` (defaulting to ``executor.debug``)
    the envelope also describes the route and the processed SQL.
    """
    if debug is None:
        debug = executor.debug

    async def handler(request: Request) -> Response:
        if request.method == "OPTIONS":
            return Response(body="", status=200)

        processed_sql: str | None = None
        try:
            params = await extract_params(request)
            processed_sql = executor.render(descriptor, params)
            result = await executor.store.execute(
                processed_sql, bind_parameters(processed_sql, params)
            )
        except BadRequest as exc:
            info = debug_info(descriptor, processed_sql) if debug else None
            return error_response(exc.status, exc.detail, debug=info)
        except (ExecutionError, TemplateError) as exc:
            logger.debug("%s %s failed: %s", request.method, request.path, exc)
            info = debug_info(descriptor, processed_sql) if debug else None
            return error_response(500, str(exc), debug=info)

        info = debug_info(descriptor, processed_sql) if debug else None
        return success_response(result.to_dict(), debug=info)

    handler.__name__ = f"sql_{descriptor.http_method.lower()}_{descriptor.operation}"
    return handler
