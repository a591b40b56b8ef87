"""``sqlroute setup``: scaffold the SQL tree and default table queries."""

import argparse

from sqlroute.sql.layout import SQLLayout


def run_setup(args: argparse.Namespace) -> None:
    layout = SQLLayout(args.sql_root, schema_path=args.schema_path)
    tables = layout.setup()
    print(f"SQL tree ready at {layout.root}")
    if tables:
        print(f"  tables: {', '.join(tables)}")
    else:
        print(f"  no tables yet; declare them in {layout.schema_path} and run setup again")
