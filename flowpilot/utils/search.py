"""
Search Helpers - LIKE patterns for free-text filters
"""

LIKE_ESCAPE = "\\"

def contains_pattern(text: str) -> str:
    """
    Pattern matching `text` anywhere in a column.

    % and _ typed by the user are matched literally; pass escape=LIKE_ESCAPE
    to like()/ilike() together with the pattern.
    """
    escaped = (
        text.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"
