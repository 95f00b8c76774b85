"""Sanitization of text cells written to CSV and Excel exports."""

# Characters that trigger formula execution in spreadsheet applications
# when they appear at the start of a cell value
_FORMULA_CHARS = ("=", "+", "-", "@", "\t", "\r", "\n", "|")


def sanitize_cell(value: object) -> object:
    """Neutralize spreadsheet formulas in text cells.

    Product descriptions and category names come from an imported
    catalog and may start with ``=`` or ``@``. Such strings are prefixed
    with a single quote; non-string values pass through unchanged.

    Args:
        value: Cell value.

    Returns:
        Safe cell value.
    """
    if not isinstance(value, str) or not value:
        return value

    if value.startswith(_FORMULA_CHARS):
        return "'" + value

    return value
