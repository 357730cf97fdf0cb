"""
Render a parameterized query with its values inlined, for debugging output.
"""

from typing import Any, Mapping

_HTML_TAB = "&nbsp;" * 4


def get_prepared_query(
    query: str, query_params: Mapping[str, Any], return_format: str = "text"
) -> str:
    """
    Substitute named placeholders with quoted values.

    Placeholders are replaced in reverse key order, so ``:id10`` is handled
    before ``:id1``. Values are not escaped; the result is for reading only.

    Args:
        query: SQL with named placeholders, e.g. ``WHERE id = :id``
        query_params: placeholder -> value
        return_format: "html" turns line breaks into ``<br />`` and wraps
            the result in ``<pre>``; any other value returns plain text

    Returns:
        str: The query with values inlined
    """
    prepared_query = query
    for placeholder in sorted(query_params, reverse=True):
        prepared_query = prepared_query.replace(
            placeholder, f"'{query_params[placeholder]}'"
        )

    if return_format == "html":
        prepared_query = prepared_query.replace("\n", "<br />").replace(
            "\t", _HTML_TAB
        )
        prepared_query = f"<pre>{prepared_query}</pre>"

    return prepared_query
