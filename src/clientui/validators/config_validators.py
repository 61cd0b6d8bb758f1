def to_uppercase(value: str | None) -> str | None:
    """
    Converts a string to uppercase if it's not None.
    """
    if value is None:
        return None
    return value.upper()

def to_lowercase(value: str | None) -> str | None:
    """
    Converts a string to lowercase if it's not None.
    """
    if value is None:
        return None
    return value.lower()

def strip_trailing_slash(value: str | None) -> str | None:
    """
    Removes trailing slashes from a URL-like string if it's not None.
    """
    if value is None:
        return None
    return value.rstrip("/")
