import pytest

from csvload.parsing.line_tokenizer import scan_line, tokenize_line, trim_line_end


@pytest.mark.parametrize(
    "line, expected",
    [
        ("", [""]),
        ("\n", [""]),
        ("\r\n", [""]),
        ("\n\r", [""]),
        ("\n\r\n", [""]),
        ("a\r\n", ["a"]),
        (",\r\n", ["", ""]),
        (",", ["", ""]),
        (",a", ["", "a"]),
        ("a,b", ["a", "b"]),
        ("a , b", ["a", "b"]),
        (" a , b ", ["a", "b"]),
        (" a, b ", ["a", "b"]),
        (" a,b ", ["a", "b"]),
        (' a, "b" ', ["a", "b"]),
        (" a , b \r\n", ["a", "b"]),
        ('"a","b \r\nbb","c"\r\n', ["a", "b \r\nbb", "c"]),
        ('"a""b","c"""', ['a"b', 'c"']),
        ('"a,b"', ["a,b"]),
        ('"a, b"', ["a, b"]),
        ('" a , b "', ["a , b"]),
    ],
)
def test_tokenize_line(line, expected):
    assert tokenize_line(line) == expected


def test_rows_from_several_lines():
    lines = [
        "a,bb,ccc",
        ",b,c",
        ',b,"c,d"',
        '"c,d"\r',
        "xx,yyy,zzzz",
        "a,b\n",
        "x,y\r",
        "z\r\n",
    ]
    assert [tokenize_line(line) for line in lines] == [
        ["a", "bb", "ccc"],
        ["", "b", "c"],
        ["", "b", "c,d"],
        ["c,d"],
        ["xx", "yyy", "zzzz"],
        ["a", "b"],
        ["x", "y"],
        ["z"],
    ]


def test_escaped_quote_collapses_once():
    # four quotes inside a quoted field are two escaped quotes
    assert tokenize_line('"a""""b"') == ['a""b']


def test_backslash_is_kept_and_escapes_nothing():
    assert tokenize_line('"a\\",b') == ["a\\", "b"]
    assert tokenize_line('"a\\b"') == ["a\\b"]


def test_quote_inside_unquoted_field_is_literal():
    assert tokenize_line('ab"c,d') == ['ab"c', "d"]


def test_text_after_closing_quote_is_appended():
    assert tokenize_line('"a"b,c') == ["ab", "c"]


def test_tab_is_not_trimmed():
    assert tokenize_line("\ta\t,b") == ["\ta\t", "b"]


def test_trim_line_end_only_strips_cr_lf_space():
    assert trim_line_end("a,b \r\n") == "a,b"
    assert trim_line_end("a,b\t\n") == "a,b\t"


def test_scan_line_reports_open_quote():
    scan = scan_line('1,"first part\r\n')
    assert scan.open_quote is True
    assert scan.fields == ["1", "first part"]

    assert scan_line('1,"done"').open_quote is False


@pytest.mark.parametrize("line", ['"', '""', '"""', ",,,", "\\", '"\\"', "  ", "\r"])
def test_tokenize_is_total(line):
    assert len(tokenize_line(line)) >= 1
