import json
import os
from dataclasses import asdict
from typing import Callable, Dict, Optional

import yaml

from csvload.outputs.mysql_connection import MySQLSettings, build_load_options, load_file, open_connection
from csvload.outputs.mysql_loader import LoadResult
from csvload.router import route
from csvload.utils.exceptions import InvalidOptionError


class ConfigExecutor:
    """
    Executes the csvload pipeline using YAML configuration.

    Layout:
        entity: orders
        source:
          file_path: data/orders.csv
          has_header: true
          fix_lengths: true
        inference:
          guess_types: true
          null_threshold_pct: 40
          sniff_row_limit: 1000000
          null_policy: force_string
        table:
          name: orders
          blob_size: 1000
          primary_key: [id]
          col_types: {amount: number, note: [string, 255]}
        output: ALL
        output_dir: outputs
        load:                   # optional, loads the file into MySQL
          table: orders         # defaults to table.name, then entity
          connection: {host: db, port: 3306, user: etl, database: shop}
          load_type: recreate
          batch_size: 500

    Keys of `load` other than table and connection are LoadOptions; primary_key,
    col_types and blob_size default to the `table` section.
    """

    def __init__(self, config_path: str, connect: Optional[Callable] = None):
        self.config_path = config_path
        self.config = self._load_config()
        self.connect = connect or open_connection

    # ------------------------------------------
    # Load YAML
    # ------------------------------------------
    def _load_config(self) -> Dict:
        if not os.path.exists(self.config_path):
            raise FileNotFoundError(f"Config file not found: {self.config_path}")

        with open(self.config_path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}

        if not isinstance(config, dict):
            raise ValueError(f"Config file {self.config_path} must contain a mapping")
        return config

    # ------------------------------------------
    # Build Router Payload
    # ------------------------------------------
    def build_payload(self) -> Dict:
        cfg = self.config

        source_cfg = cfg.get("source", {}) or {}
        inference_cfg = dict(cfg.get("inference", {}) or {})
        table_cfg = cfg.get("table", {}) or {}

        return {
            "file_path": self._source_path(),
            "entity": cfg.get("entity"),
            "has_header": source_cfg.get("has_header", True),
            "fix_lengths": source_cfg.get("fix_lengths", True),
            "guess_types": inference_cfg.pop("guess_types", True),
            "inference": inference_cfg,
            "output": cfg.get("output", "ALL"),
            "table": table_cfg.get("name"),
            "blob_size": table_cfg.get("blob_size", 1000),
            "primary_key": table_cfg.get("primary_key"),
            "col_types": table_cfg.get("col_types"),
            "user_id": "config_executor",
        }

    def _source_path(self) -> Optional[str]:
        file_path = (self.config.get("source", {}) or {}).get("file_path")
        if file_path and not os.path.isabs(file_path):
            # relative to the config file
            file_path = os.path.join(os.path.dirname(os.path.abspath(self.config_path)), file_path)
        return file_path

    # ------------------------------------------
    # MySQL Load
    # ------------------------------------------
    def load(self) -> LoadResult:
        cfg = self.config
        load_cfg = dict(cfg.get("load") or {})
        if not load_cfg:
            raise InvalidOptionError("load", f"config {self.config_path} has no load section")

        table_cfg = cfg.get("table", {}) or {}
        inference_cfg = dict(cfg.get("inference", {}) or {})

        settings = MySQLSettings.from_mapping(load_cfg.pop("connection", None))
        table = load_cfg.pop("table", None) or table_cfg.get("name") or cfg.get("entity")
        file_path = self._source_path()
        if not file_path:
            raise InvalidOptionError("file_path", "source.file_path is required for loading")
        if not table:
            raise InvalidOptionError("table", "load.table, table.name or entity is required for loading")

        for key in ("primary_key", "col_types", "blob_size"):
            if table_cfg.get(key) is not None:
                load_cfg.setdefault(key, table_cfg[key])
        if "guess_types" in inference_cfg:
            load_cfg.setdefault("guess_types", inference_cfg.pop("guess_types"))

        options = build_load_options(load_cfg, inference_cfg)
        return load_file(file_path, table, options, settings, connect=self.connect)

    # ------------------------------------------
    # Execute Pipeline
    # ------------------------------------------
    def execute(self) -> Dict:
        payload = self.build_payload()
        result = route(payload)
        self._save_outputs(result)

        if self.config.get("load"):
            result["load"] = asdict(self.load())
        return result

    # ------------------------------------------
    # Save Outputs
    # ------------------------------------------
    def _save_outputs(self, result: Dict):
        output_dir = self.config.get("output_dir", "outputs")
        os.makedirs(output_dir, exist_ok=True)

        entity = result.get("entity", "unknown")

        with open(os.path.join(output_dir, f"{entity}.profile.json"), "w", encoding="utf-8") as f:
            json.dump(
                {"entity": entity, "header": result.get("header"), "columns": result["columns"]},
                f,
                indent=2,
            )

        if "rows" in result:
            with open(os.path.join(output_dir, f"{entity}.rows.json"), "w", encoding="utf-8") as f:
                json.dump(result["rows"], f, indent=2)

        if "ddl" in result:
            with open(os.path.join(output_dir, f"{entity}.sql"), "w", encoding="utf-8") as f:
                f.write(result["ddl"])
