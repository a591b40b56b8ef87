"""``sqlroute routes``: print the route table a SQL tree compiles to."""

import argparse
import sys
from pathlib import Path

from sqlroute.errors import CompileError
from sqlroute.routing.route import RouteTable
from sqlroute.sql.compiler import check_routes, compile_routes


def run_routes(args: argparse.Namespace) -> None:
    """Compile ``args.sql_root`` and print METHOD, PATH, TABLE and SQL FILE.

    With ``--check`` the table is validated instead and the command exits 1
    when it is empty or any route is invalid.
    """
    schema = Path(args.schema_path) if args.schema_path else Path(args.sql_root) / "schema.sql"
    try:
        table = compile_routes(args.sql_root, base_url=args.base_url, exclude=(schema,))
    except CompileError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    if args.check:
        _check(table)
        return

    if not len(table):
        print("No routes found.")
        return

    rows = [
        (route.http_method, route.path, route.table_name or "-", route.sql_path)
        for route in table
    ]
    headers = ("METHOD", "PATH", "TABLE", "SQL FILE")
    widths = [max(len(h), *(len(row[i]) for row in rows)) for i, h in enumerate(headers[:3])]

    fmt = f"{{:<{widths[0]}}}  {{:<{widths[1]}}}  {{:<{widths[2]}}}  {{}}"
    print(fmt.format(*headers))
    print("-" * min(sum(widths) + 6 + max(len(row[3]) for row in rows), 100))
    for row in rows:
        print(fmt.format(*row))


def _check(table: RouteTable) -> None:
    problems = check_routes(table)
    if problems:
        for problem in problems:
            print(f"Error: {problem}", file=sys.stderr)
        raise SystemExit(1)
    print(f"All {len(table)} routes OK.")
