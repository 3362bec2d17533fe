from urllib.parse import urljoin


def normalize_identity_url(url: str | None) -> str:
    """Lower-case the URL, drop the query string, trim one trailing slash.

    The fragment is kept: hash-routed listings use it to tell events apart.
    """
    cleaned = (url or "").strip().lower().split("?", 1)[0]
    if cleaned.endswith("/"):
        cleaned = cleaned[:-1]
    return cleaned


def absolute_url(base: str, href: str | None) -> str:
    href = (href or "").strip()
    if not href:
        return ""
    if href.startswith(("http://", "https://")):
        return href
    if href.startswith("//"):
        return f"https:{href}"
    return urljoin(base, href)
