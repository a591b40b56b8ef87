"""``sqlroute serve``: build the app from flags and run it."""

import argparse
import logging
import sys
from pathlib import Path

from sqlroute.config import AppConfig
from sqlroute.errors import SQLRouteError

logger = logging.getLogger("sqlroute.cli")


def config_from_args(args: argparse.Namespace) -> AppConfig:
    return AppConfig(
        sql_root=args.sql_root,
        schema_path=args.schema_path,
        database_path=args.database_path,
        base_url=args.base_url,
        host=args.host,
        port=args.port,
        cors=not args.no_cors,
        debug=args.debug,
        strict_templates=args.strict_templates,
        echo_sql=args.echo,
        log_level=args.log_level,
    )


def needs_setup(config: AppConfig) -> bool:
    """True when the SQL root or the database's directory does not exist yet."""
    return (
        not Path(config.sql_root).is_dir()
        or not Path(config.database_path).parent.is_dir()
    )


def run_serve(args: argparse.Namespace) -> None:
    """Validate the config, scaffold when needed, and start the server.

    The layout is created when ``--setup`` is given or when the SQL root or
    the database directory is missing.
    """
    from sqlroute.app import App

    config = config_from_args(args)
    try:
        config.validate()
        if args.setup or needs_setup(config):
            from sqlroute.sql.layout import SQLLayout

            logger.info("Setting up SQL layout at %s", config.sql_root)
            SQLLayout(
                config.sql_root,
                schema_path=config.schema_path,
                tables_marker=config.tables_marker,
                database_marker=config.database_marker,
            ).setup()
            Path(config.database_path).parent.mkdir(parents=True, exist_ok=True)
        App(config).run()
    except SQLRouteError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
