from types import SimpleNamespace

import pytest

from csvload.observability.identity import extract_user_identity
from csvload.router import route
from csvload.utils.exceptions import InvalidOptionError

CONTENT = "Order Id,Order Date,Amount\n1,2021-01-02,3.5\n2,2021-01-03,4\n"


def test_route_profile_only():
    response = route({"content": CONTENT, "entity": "orders"})

    assert response["status"] == "SUCCESS"
    assert response["entity"] == "orders"
    assert response["header"] == ["Order Id", "Order Date", "Amount"]
    assert response["row_count"] == 2
    assert [c["type"] for c in response["columns"]] == ["integer", "date", "number"]
    assert "rows" not in response
    assert "ddl" not in response


def test_route_all_outputs():
    response = route({
        "content": CONTENT,
        "entity": "orders",
        "output": "all",
        "table": "orders_v2",
        "primary_key": ["Order_Id"],
    })

    assert response["rows"] == [[1, "2021-01-02", 3.5], [2, "2021-01-03", 4.0]]
    assert response["ddl"] == (
        "DROP TABLE IF EXISTS `orders_v2`;\n"
        "CREATE TABLE `orders_v2` (\n"
        "  `Order_Id` BIGINT,\n"
        "  `Order_Date` DATE,\n"
        "  `Amount` DOUBLE\n"
        ");\n"
        "ALTER TABLE `orders_v2` ADD PRIMARY KEY (`Order_Id`);\n"
    )


def test_route_ddl_without_header_uses_entity_names():
    response = route({"content": "1,abc\n", "entity": "t", "has_header": False, "output": "DDL"})
    assert "`t_1` BIGINT" in response["ddl"]
    assert "`t_2` VARCHAR(3)" in response["ddl"]
    assert response["header"] is None


@pytest.mark.parametrize(
    "payload, option",
    [
        ({"content": CONTENT, "output": "PARQUET"}, "output"),
        ({"content": CONTENT, "inference": {"null_threshold_pct": 101}}, "null_threshold_pct"),
        ({"content": CONTENT, "inference": {"sample": 3}}, "sample"),
        ({"content": CONTENT, "file_path": "x.csv"}, "file_path"),
        ({}, "file_path"),
    ],
)
def test_route_rejects_bad_options(payload, option):
    with pytest.raises(InvalidOptionError) as exc:
        route(payload)
    assert exc.value.option == option


def test_identity_order():
    request = SimpleNamespace(headers={"X-Goog-Authenticated-User-Email": "accounts.google.com:ann@example.com"})
    assert extract_user_identity(request, {"user_id": "p"}) == "ann@example.com"

    request = SimpleNamespace(headers={"x-user-id": "u-7"})
    assert extract_user_identity(request, {"user_id": "p"}) == "u-7"

    assert extract_user_identity(None, {"user_id": "p"}) == "p"
    assert extract_user_identity(None, {}) == "anonymous"


def test_route_rejects_unknown_primary_key():
    with pytest.raises(InvalidOptionError) as exc:
        route({"content": CONTENT, "output": "DDL", "primary_key": ["Order Id"]})
    assert exc.value.option == "primary_key"
    assert "Order_Id" in str(exc.value)

    # a profile-only request does not look at the key
    assert route({"content": CONTENT, "primary_key": ["nope"]})["status"] == "SUCCESS"
