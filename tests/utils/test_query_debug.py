"""Unit tests for utils.query_debug and utils.logging_setup."""

import logging
from unittest.mock import patch

from dbregistry.utils import get_prepared_query, setup_logging


def test_text_substitution() -> None:
    sql = "SELECT * FROM users WHERE id = :id AND status = :status"
    assert (
        get_prepared_query(sql, {":id": 7, ":status": "active"})
        == "SELECT * FROM users WHERE id = '7' AND status = 'active'"
    )


def test_longer_placeholders_replaced_first() -> None:
    sql = "WHERE a = :id AND b = :id2"
    assert get_prepared_query(sql, {":id": 1, ":id2": 2}) == "WHERE a = '1' AND b = '2'"


def test_html_format() -> None:
    sql = "SELECT *\n\tFROM t\nWHERE id = :id"
    assert get_prepared_query(sql, {":id": 3}, "html") == (
        "<pre>SELECT *<br />&nbsp;&nbsp;&nbsp;&nbsp;FROM t<br />WHERE id = '3'</pre>"
    )


def test_unknown_format_falls_back_to_text() -> None:
    sql = "SELECT *\n\tFROM t WHERE id = :id"
    assert get_prepared_query(sql, {":id": 3}, "markdown") == (
        "SELECT *\n\tFROM t WHERE id = '3'"
    )


@patch("dbregistry.utils.logging_setup.logging.basicConfig")
def test_setup_logging_uses_level(mock_basic_config) -> None:
    setup_logging("debug")
    kwargs = mock_basic_config.call_args.kwargs
    assert kwargs["level"] == logging.DEBUG
    assert "%(levelname)s" in kwargs["format"]
