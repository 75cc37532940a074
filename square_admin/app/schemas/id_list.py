"""
schemas/id_list.py - Parsing of comma-separated id path segments.

Bulk endpoints address several rows in one path segment, e.g.
DELETE /sqr-square/3,4,9. Every token must be an unsigned decimal integer,
the same form the <int:> converter accepts for single ids; anything else is
rejected with INVALID_ID_LIST (400) before a service is called.
"""

from __future__ import annotations

from square_admin.app.errors import AppError, ErrorCode


def parse_id_list(raw: str, field: str = "ids") -> list[int]:
    """
    Splits `raw` on commas and parses each token as an int.

    Order is preserved and duplicates are dropped.

    Raises:
      AppError(INVALID_ID_LIST, 400) - empty segment, empty token or non-integer token.
    """
    tokens = [token.strip() for token in (raw or "").split(",")]
    if not tokens or any(token == "" for token in tokens):
        raise AppError(
            ErrorCode.INVALID_ID_LIST,
            f"'{raw}' is not a comma-separated list of ids.",
            400,
            field=field,
        )

    ids: list[int] = []
    for token in tokens:
        if not (token.isascii() and token.isdigit()):
            raise AppError(
                ErrorCode.INVALID_ID_LIST,
                f"'{token}' is not a valid id.",
                400,
                field=field,
            )
        value = int(token)
        if value not in ids:
            ids.append(value)
    return ids
