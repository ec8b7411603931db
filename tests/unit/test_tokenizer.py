from __future__ import annotations

from txn_import.csvfile.tokenizer import tokenize_line


def test_plain_fields():
    assert tokenize_line("income,Salary,5000,2026-01-01") == ["income", "Salary", "5000", "2026-01-01"]


def test_quoted_comma():
    assert tokenize_line('a,"b,c",d') == ["a", "b,c", "d"]


def test_escaped_quote():
    assert tokenize_line('a,"b""c",d') == ["a", 'b"c', "d"]


def test_fields_are_trimmed():
    assert tokenize_line("  income ,  Coffee  , 3.5 ") == ["income", "Coffee", "3.5"]


def test_trailing_comma_yields_empty_last_field():
    assert tokenize_line("a,b,") == ["a", "b", ""]


def test_empty_line_yields_single_empty_field():
    assert tokenize_line("") == [""]


def test_quoted_empty_field():
    assert tokenize_line('a,"",c') == ["a", "", "c"]


def test_unbalanced_quote_reads_rest_as_quoted():
    # 奇数個の引用符はエラーにしない: 以降はクォート内として扱う
    assert tokenize_line('a,"b,c,d') == ["a", "b,c,d"]


def test_quote_in_middle_of_field_toggles_quoting():
    assert tokenize_line('ab"c,d"e,f') == ["abc,de", "f"]
