"""sqlroute CLI: serve a SQL tree, list its routes, scaffold a layout.

Entry point registered as ``sqlroute`` in ``pyproject.toml``::

    [project.scripts]
    sqlroute = "sqlroute.cli:main"
"""

import argparse
import logging
import sys

from sqlroute.config import AppConfig

_DEFAULTS = AppConfig()


def _add_tree_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--sql",
        dest="sql_root",
        default=str(_DEFAULTS.sql_root),
        help=f"SQL files root directory (default: {_DEFAULTS.sql_root})",
    )
    parser.add_argument(
        "--schema",
        dest="schema_path",
        default=None,
        help="Schema file (default: <sql root>/schema.sql)",
    )


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``sqlroute`` command."""
    parser = argparse.ArgumentParser(
        prog="sqlroute",
        description="sqlroute: a directory of SQL files served as a REST API.",
    )
    parser.add_argument(
        "--log-level",
        default=_DEFAULTS.log_level,
        choices=("debug", "info", "warning", "error"),
        help="Logging level",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- sqlroute serve ---------------------------------------------------
    serve_parser = subparsers.add_parser("serve", help="Serve the SQL tree over HTTP")
    _add_tree_args(serve_parser)
    serve_parser.add_argument(
        "--db",
        dest="database_path",
        default=str(_DEFAULTS.database_path),
        help=f"Database file path (default: {_DEFAULTS.database_path})",
    )
    serve_parser.add_argument(
        "--base",
        dest="base_url",
        default=_DEFAULTS.base_url,
        help=f"API base URL (default: {_DEFAULTS.base_url})",
    )
    serve_parser.add_argument("--host", default=_DEFAULTS.host, help="Bind host address")
    serve_parser.add_argument(
        "--port", "-p", type=int, default=_DEFAULTS.port, help="HTTP server port"
    )
    serve_parser.add_argument(
        "--debug",
        action="store_true",
        help="Include route and SQL details in responses; reload on changes",
    )
    serve_parser.add_argument("--no-cors", action="store_true", help="Disable CORS headers")
    serve_parser.add_argument(
        "--strict-templates",
        action="store_true",
        help="Fail requests whose SQL keeps unresolved {{placeholders}}",
    )
    serve_parser.add_argument("--echo", action="store_true", help="Log every SQL statement")
    serve_parser.add_argument(
        "--setup", action="store_true", help="Scaffold the directory layout first"
    )

    # -- sqlroute routes --------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="List the compiled routes")
    _add_tree_args(routes_parser)
    routes_parser.add_argument(
        "--base",
        dest="base_url",
        default=_DEFAULTS.base_url,
        help=f"API base URL (default: {_DEFAULTS.base_url})",
    )
    routes_parser.add_argument(
        "--check",
        action="store_true",
        help="Validate the route table and exit 1 if it is empty or invalid",
    )

    # -- sqlroute setup ---------------------------------------------------
    setup_parser = subparsers.add_parser(
        "setup", help="Create the directory layout and default table queries"
    )
    _add_tree_args(setup_parser)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )

    if args.command == "serve":
        from sqlroute.cli._serve import run_serve

        run_serve(args)
    elif args.command == "routes":
        from sqlroute.cli._routes import run_routes

        run_routes(args)
    elif args.command == "setup":
        from sqlroute.cli._setup import run_setup

        run_setup(args)
