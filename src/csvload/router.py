from dataclasses import replace
from typing import Dict, Optional
from fastapi import Request

# ---------------- Input ----------------
from csvload.adapters.csv_adapter import CSVAdapter
from csvload.inference.config import InferenceConfig

# ---------------- Pipeline steps ----------------
from csvload.pipeline.naming import cleanup_headers

# ---------------- Outputs ----------------
from csvload.outputs.json_output import profiles_to_dicts, rows_to_jsonable
from csvload.outputs.mysql_ddl import MySQLDDLGenerator

# ---------------- Observability ----------------
from csvload.observability.logger import (log_event, generate_request_id, RequestTimer,)
from csvload.observability.identity import extract_user_identity
from csvload.utils.exceptions import InvalidOptionError

OUTPUT_TYPES = {"PROFILE", "ROWS", "DDL", "ALL"}


def _build_ddl(table, payload: Dict) -> str:
    names = cleanup_headers(table.column_names)
    primary_key = payload.get("primary_key") or []
    if isinstance(primary_key, str):
        primary_key = [primary_key]
    missing = [key for key in primary_key if key not in names]
    if missing:
        raise InvalidOptionError("primary_key", f"column(s) {missing} not found in header {names}")

    columns = [replace(col, name=name) for col, name in zip(table.columns, names)]
    generator = MySQLDDLGenerator(
        columns,
        col_types=payload.get("col_types"),
        blob_size=payload.get("blob_size", 1000),
        primary_key=primary_key,
    )
    return generator.generate(payload.get("table") or table.name)


# ==========================================================
# ROUTER
# ==========================================================
def route(payload: Dict, request: Optional[Request] = None) -> Dict:
    """
    csvload main entry point.

    Flow:
    Source → Tokenize → Type inference → Outputs (profile / rows / DDL)
    """

    request_id = generate_request_id("profile")
    user_id = extract_user_identity(request, payload)
    timer = RequestTimer()

    entity = payload.get("entity")
    log_event("CSV_PROFILE_STARTED", {
        "request_id": request_id,
        "user_id": user_id,
        "entity": entity,
        "source_file": payload.get("file_path"),
    })

    try:
        # --------------------------------------------------
        # Options (validated before any row is read)
        # --------------------------------------------------
        output_type = str(payload.get("output", "PROFILE")).upper()
        if output_type not in OUTPUT_TYPES:
            raise InvalidOptionError(
                "output", f"must be one of {sorted(OUTPUT_TYPES)}, got {output_type!r}"
            )
        inference = InferenceConfig.from_mapping(payload.get("inference"))
        if (payload.get("file_path") is None) == (payload.get("content") is None):
            raise InvalidOptionError("file_path", "exactly one of file_path or content is required")

        # --------------------------------------------------
        # Phase 1 – Parse + infer
        # --------------------------------------------------
        adapter = CSVAdapter(
            file_path=payload.get("file_path"),
            content=payload.get("content"),
            entity_name=entity,
            has_header=payload.get("has_header", True),
            fix_lengths=payload.get("fix_lengths", True),
            guess_types=payload.get("guess_types", True),
            inference=inference,
        )
        table = adapter.parse()
        timer.mark("parse")

        response = {
            "status": "SUCCESS",
            "request_id": request_id,
            "entity": table.name,
            "header": table.header,
            "row_count": len(table.rows),
            "columns": profiles_to_dicts(table.columns),
            "metadata": table.metadata,
        }

        # --------------------------------------------------
        # Phase 2 – Outputs
        # --------------------------------------------------
        if output_type in {"ROWS", "ALL"}:
            response["rows"] = rows_to_jsonable(table.rows)

        if output_type in {"DDL", "ALL"}:
            response["ddl"] = _build_ddl(table, payload)
        timer.mark("outputs")

    except Exception as e:
        log_event("CSV_PROFILE_FAILED", {
            "request_id": request_id,
            "entity": entity,
            "error": str(e),
            "duration_seconds": timer.duration(),
        })
        raise

    log_event("CSV_PROFILE_COMPLETED", {
        "request_id": request_id,
        "entity": response["entity"],
        "row_count": response["row_count"],
        "column_types": [c["type"] for c in response["columns"]],
        "phases": timer.phases,
        "duration_seconds": timer.duration(),
    })
    return response
