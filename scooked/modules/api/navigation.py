from typing import Optional
from urllib.parse import quote

SEARCH_URL = "https://www.google.com/search?q="
# Characters a URI component may carry unescaped
URI_COMPONENT_SAFE = "!~*'()"


def resolve_navigation(query: str) -> Optional[str]:
    """
    Turn address bar input into a URL.

    Input that contains a dot and no spaces is treated as an address; anything
    else becomes a search.

    Returns:
        The target URL, or None for empty input

    Example:
        >>> resolve_navigation("example.com")
        'https://example.com'
        >>> resolve_navigation("python asyncio")
        'https://www.google.com/search?q=python%20asyncio'
    """
    query = query.strip()
    if not query:
        return None

    if "." in query and " " not in query:
        return query if query.startswith("http") else f"https://{query}"

    return f"{SEARCH_URL}{quote(query, safe=URI_COMPONENT_SAFE)}"
