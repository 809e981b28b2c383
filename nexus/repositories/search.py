LIKE_ESCAPE = "\\"


def contains_pattern(search: str) -> str:
    """
    LIKE pattern matching `search` as a literal substring.

    Use with ``column.ilike(pattern, escape=LIKE_ESCAPE)`` so that ``%`` and
    ``_`` typed by the user are not treated as wildcards.
    """
    escaped = (
        search.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"
