LIKE_ESCAPE = "\\"


def like_pattern(value: str) -> str:
    """Substring pattern that matches the trimmed value literally"""
    escaped = (
        value.strip()
        .replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"


def icontains(column, value: str):
    """Case-insensitive substring match; % and _ in the value are not wildcards"""
    return column.ilike(like_pattern(value), escape=LIKE_ESCAPE)
