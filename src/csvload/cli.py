import argparse
import json
import os
import shutil
from typing import Any, Dict

from csvload.execution.config_executor import ConfigExecutor
from csvload.outputs.mysql_connection import MySQLSettings, build_load_options, load_file, open_connection
from csvload.outputs.mysql_loader import LoadResult, LoadType
from csvload.router import route
from csvload.utils.exceptions import CsvLoadError


class C:
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"


def cprint(text: str, color: str = C.RESET, bold: bool = False):
    prefix = (C.BOLD if bold else "") + color
    print(f"{prefix}{text}{C.RESET}")


def _clean_output_dir(path: str) -> None:
    if not os.path.isdir(path):
        return
    for name in os.listdir(path):
        full = os.path.join(path, name)
        if os.path.isfile(full) or os.path.islink(full):
            os.remove(full)
        elif os.path.isdir(full):
            shutil.rmtree(full)


def _write_json(path: str, payload: Any) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)


def _write_text(path: str, content: str) -> None:
    with open(path, "w", encoding="utf-8") as f:
        f.write(content)


def _persist_artifacts(response: Dict[str, Any], output_dir: str) -> None:
    # Always write the profile
    _write_json(
        os.path.join(output_dir, "profile.json"),
        {
            "entity": response.get("entity"),
            "header": response.get("header"),
            "row_count": response.get("row_count"),
            "columns": response.get("columns"),
            "metadata": response.get("metadata"),
        },
    )

    if "rows" in response:
        _write_json(os.path.join(output_dir, "rows.json"), response["rows"])

    if "ddl" in response:
        _write_text(os.path.join(output_dir, "create_table.sql"), response["ddl"])


def _build_payload_from_args(args: argparse.Namespace) -> Dict[str, Any]:
    return {
        "file_path": args.file,
        "entity": args.entity,
        "has_header": not args.no_header,
        "fix_lengths": not args.no_fix_lengths,
        "guess_types": not args.no_guess_types,
        "inference": _inference_options(args),
        "output": args.output,
        "table": args.table,
        "blob_size": args.blob_size,
        "primary_key": args.primary_key,
        "user_id": args.user_id,
    }


def _inference_options(args: argparse.Namespace) -> Dict[str, Any]:
    inference = {}
    if args.null_threshold is not None:
        inference["null_threshold_pct"] = args.null_threshold
    if args.sniff_rows is not None:
        inference["sniff_row_limit"] = args.sniff_rows
    if args.null_policy is not None:
        inference["null_policy"] = args.null_policy
    return inference


def _run_load(args: argparse.Namespace) -> LoadResult:
    if args.config:
        return ConfigExecutor(args.config, connect=open_connection).load()

    settings = MySQLSettings(
        host=args.db_host,
        port=args.db_port,
        user=args.db_user,
        database=args.db_name,
    )
    options = build_load_options(
        {
            "load_type": args.load_type,
            "batch_size": args.batch_size,
            "blob_size": args.blob_size,
            "primary_key": args.primary_key or [],
            "guess_types": not args.no_guess_types,
        },
        _inference_options(args),
    )
    table = args.table or args.entity or os.path.splitext(os.path.basename(args.file))[0]
    return load_file(args.file, table, options, settings, connect=open_connection)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="CSV type inference and MySQL DDL generator")

    parser.add_argument("--config", help="Path to YAML config file")
    parser.add_argument("--file", help="CSV file path")
    parser.add_argument("--entity", help="Entity name (defaults to the file name)")
    parser.add_argument("--no-header", action="store_true", help="First row is data, not a header")
    parser.add_argument("--no-fix-lengths", action="store_true", help="Keep rows as wide as they are")
    parser.add_argument("--no-guess-types", action="store_true", help="Treat every column as string")

    parser.add_argument("--null-threshold", type=float, help="Max percentage of empty values (0-100)")
    parser.add_argument("--sniff-rows", type=int, help="Rows used for type guessing")
    parser.add_argument(
        "--null-policy",
        choices=["force_string", "merge_only"],
        help="What happens when a column has more nulls than the threshold",
    )

    parser.add_argument(
        "--output",
        default="ALL",
        choices=["PROFILE", "ROWS", "DDL", "ALL"],
        help="Output type",
    )
    parser.add_argument("--table", help="Table name used in the DDL")
    parser.add_argument("--blob-size", type=int, default=1000)
    parser.add_argument("--primary-key", nargs="+", help="Primary key column(s)")

    parser.add_argument("--output-dir", default="artifacts")
    parser.add_argument("--clean-output-dir", action="store_true")
    parser.add_argument("--user-id", default="cli_user")

    load = parser.add_argument_group("MySQL load (password from $CSVLOAD_MYSQL_PASSWORD)")
    load.add_argument("--load", action="store_true", help="Load the file into MySQL instead of profiling")
    load.add_argument(
        "--load-type",
        default=LoadType.RECREATE.value,
        choices=[t.value for t in LoadType],
    )
    load.add_argument("--batch-size", type=int, default=100, help="Records per INSERT statement")
    load.add_argument("--db-host", default="localhost")
    load.add_argument("--db-port", type=int, default=3306)
    load.add_argument("--db-user", default="root")
    load.add_argument("--db-name", help="Target database")
    return parser


def _main_load(args: argparse.Namespace):
    try:
        cprint("\n[START] MySQL load started", C.BLUE, bold=True)
        result = _run_load(args)
        cprint(
            f"[COMPLETE] Loaded {result.selected} row(s), {result.affected} affected, "
            f"columns: {', '.join(result.columns)}",
            C.GREEN,
            bold=True,
        )
    except (CsvLoadError, OSError, ValueError) as e:
        cprint("\n[FAILED] MySQL load failed.", C.RED, bold=True)
        cprint(str(e), C.RED)
        raise SystemExit(1)


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.config and not args.file:
        parser.error("one of --config or --file is required")

    if args.load:
        _main_load(args)
        return

    if args.config:
        payload = ConfigExecutor(args.config).build_payload()
    else:
        payload = _build_payload_from_args(args)

    if args.output_dir:
        os.makedirs(args.output_dir, exist_ok=True)
        if args.clean_output_dir:
            _clean_output_dir(args.output_dir)

    try:
        cprint("\n[START] CSV profiling started", C.BLUE, bold=True)
        cprint(f"[INFO] File={payload.get('file_path')}  Output={payload.get('output')}", C.DIM)

        response = route(payload)

        for col in response["columns"]:
            cprint(
                f"  {col.get('name') or '?'}: {col['type']} "
                f"width={col['max_width']} nulls={col['null_count']}",
                C.RESET,
            )

        if args.output_dir:
            _persist_artifacts(response, args.output_dir)
            cprint(f"\n[DONE] Artifacts written to: {args.output_dir}", C.GREEN, bold=True)

        cprint("[COMPLETE] CSV profiling completed", C.GREEN, bold=True)

    except (CsvLoadError, OSError, ValueError) as e:
        cprint("\n[FAILED] CSV profiling failed.", C.RED, bold=True)
        cprint(str(e), C.RED)
        raise SystemExit(1)


if __name__ == "__main__":
    main()
