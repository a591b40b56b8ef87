"""SQL template substitution.

Recognized placeholders::

    {{table}}    -> the route's table name, verbatim
    {{columns}}  -> params["columns"] if a string, else ``*``
    {{values}}   -> params["values"] if a string, else one ``?`` per
                    bindable parameter
    {{updates}}  -> params["updates"] if a string, else ``column = ?``

Any other ``{{name}}`` is left in place. Substitution is one regex sweep
over the original text, so substituted values are never rescanned.

``{{table}}`` is not escaped: table names come from directory names under
the SQL root, never from request input.
"""

import re
from collections.abc import Mapping
from typing import Any

_PLACEHOLDER_RE = re.compile(r"\{\{(\w+)\}\}")

# Parameters that steer substitution rather than bind to ``?`` slots
DIRECTIVE_KEYS = frozenset({"columns", "values", "updates"})

_FALLBACK_UPDATES = "column = ?"


def is_directive(key: str, value: Any) -> bool:
    """True if ``key`` is a string-valued template directive."""
    return key in DIRECTIVE_KEYS and isinstance(value, str)


def bindable_params(params: Mapping[str, Any]) -> dict[str, Any]:
    """The parameters left over once template directives are removed."""
    return {k: v for k, v in params.items() if not is_directive(k, v)}


def process_template(
    sql: str,
    table_name: str | None,
    params: Mapping[str, Any],
) -> str:
    """Substitute recognized placeholders in ``sql``.

    Unrecognized placeholders pass through unchanged, and so does
    ``{{table}}`` when ``table_name`` is ``None`` (universal routes).
    """

    def substitute(match: re.Match[str]) -> str:
        name = match.group(1)
        if name == "table":
            return table_name if table_name is not None else match.group(0)
        if name == "columns":
            columns = params.get("columns")
            return columns if isinstance(columns, str) else "*"
        if name == "values":
            values = params.get("values")
            if isinstance(values, str):
                return values
            return ", ".join("?" for _ in bindable_params(params))
        if name == "updates":
            updates = params.get("updates")
            return updates if isinstance(updates, str) else _FALLBACK_UPDATES
        return match.group(0)

    return _PLACEHOLDER_RE.sub(substitute, sql)


def unresolved_placeholders(sql: str) -> list[str]:
    """Names of ``{{placeholders}}`` still present in ``sql``, in order."""
    seen: dict[str, None] = {}
    for match in _PLACEHOLDER_RE.finditer(sql):
        seen.setdefault(match.group(1), None)
    return list(seen)
