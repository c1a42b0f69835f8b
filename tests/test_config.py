import pytest
import yaml

from csvload.execution.config_executor import ConfigExecutor
from csvload.inference.config import InferenceConfig, NullPolicy
from csvload.utils.exceptions import InvalidOptionError


def test_defaults():
    config = InferenceConfig()
    assert config.null_threshold_pct == 40.0
    assert config.sniff_row_limit == 1_000_000
    assert config.null_policy is NullPolicy.FORCE_STRING


@pytest.mark.parametrize("pct", [0, 0.0, 100, 100.0, 37.5])
def test_threshold_bounds_are_inclusive(pct):
    assert InferenceConfig(null_threshold_pct=pct).null_threshold_pct == pct


@pytest.mark.parametrize(
    "kwargs, option",
    [
        ({"null_threshold_pct": -0.1}, "null_threshold_pct"),
        ({"null_threshold_pct": 100.5}, "null_threshold_pct"),
        ({"null_threshold_pct": "40"}, "null_threshold_pct"),
        ({"null_threshold_pct": True}, "null_threshold_pct"),
        ({"sniff_row_limit": 0}, "sniff_row_limit"),
        ({"sniff_row_limit": -5}, "sniff_row_limit"),
        ({"sniff_row_limit": 2.5}, "sniff_row_limit"),
        ({"sniff_row_limit": True}, "sniff_row_limit"),
        ({"null_policy": "sometimes"}, "null_policy"),
    ],
)
def test_invalid_options_name_the_option(kwargs, option):
    with pytest.raises(InvalidOptionError) as exc:
        InferenceConfig(**kwargs)
    assert exc.value.option == option
    assert option in str(exc.value)


def test_invalid_option_is_a_value_error():
    with pytest.raises(ValueError):
        InferenceConfig(sniff_row_limit=0)


def test_from_mapping():
    config = InferenceConfig.from_mapping(
        {"null_threshold_pct": 10, "sniff_row_limit": 50, "null_policy": "MERGE_ONLY"}
    )
    assert config == InferenceConfig(10, 50, NullPolicy.MERGE_ONLY)
    assert InferenceConfig.from_mapping(None) == InferenceConfig()


def test_from_mapping_rejects_unknown_keys():
    with pytest.raises(InvalidOptionError) as exc:
        InferenceConfig.from_mapping({"max_nulls": 3})
    assert exc.value.option == "max_nulls"


def _write_config(tmp_path, config):
    path = tmp_path / "job.yaml"
    path.write_text(yaml.safe_dump(config), encoding="utf-8")
    return str(path)


def test_config_executor_builds_payload(tmp_path):
    path = _write_config(tmp_path, {
        "entity": "orders",
        "source": {"file_path": "orders.csv", "has_header": True},
        "inference": {"guess_types": True, "null_threshold_pct": 25, "sniff_row_limit": 10},
        "table": {"name": "orders_t", "primary_key": ["id"], "col_types": {"note": ["string", 64]}},
        "output": "DDL",
    })
    payload = ConfigExecutor(path).build_payload()

    assert payload["file_path"] == str(tmp_path / "orders.csv")
    assert payload["guess_types"] is True
    assert payload["inference"] == {"null_threshold_pct": 25, "sniff_row_limit": 10}
    assert payload["table"] == "orders_t"
    assert payload["primary_key"] == ["id"]
    assert payload["col_types"] == {"note": ["string", 64]}
    assert payload["output"] == "DDL"


def test_config_executor_writes_outputs(tmp_path):
    (tmp_path / "orders.csv").write_text("id,placed\n1,2021-01-01\n2,2021-01-02\n", encoding="utf-8")
    out_dir = tmp_path / "out"
    path = _write_config(tmp_path, {
        "entity": "orders",
        "source": {"file_path": "orders.csv"},
        "output": "ALL",
        "output_dir": str(out_dir),
    })

    result = ConfigExecutor(path).execute()

    assert [c["type"] for c in result["columns"]] == ["integer", "date"]
    assert (out_dir / "orders.profile.json").exists()
    assert (out_dir / "orders.rows.json").exists()
    assert "`placed` DATE" in (out_dir / "orders.sql").read_text(encoding="utf-8")


def test_config_executor_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        ConfigExecutor(str(tmp_path / "nope.yaml"))
