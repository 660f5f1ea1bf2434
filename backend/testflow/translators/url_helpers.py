import re
from typing import Optional
from urllib.parse import urlparse

DEFAULT_PORTS = {"http": 80, "https": 443}


def url_origin(url: Optional[str]) -> str:
    """
    ``https://user:pw@Shop.Test:443/home?x=1`` -> ``https://shop.test``.

    Host is lower-cased, credentials are dropped and the port is kept only
    when it is not the scheme default. Empty when there is no http(s) origin.
    """
    if not url:
        return ""
    try:
        parsed = urlparse(url.strip())
        port = parsed.port
    except ValueError:
        return ""

    scheme = parsed.scheme.lower()
    host = parsed.hostname
    if scheme not in DEFAULT_PORTS or not host:
        return ""
    if ":" in host:
        host = f"[{host}]"
    if port is not None and port != DEFAULT_PORTS[scheme]:
        return f"{scheme}://{host}:{port}"
    return f"{scheme}://{host}"


def application_name_from_url(url: str, default: str) -> str:
    """``https://www.shop.example`` -> ``Shop``."""
    try:
        hostname = urlparse(url).hostname if url else None
    except ValueError:
        hostname = None
    if not hostname:
        return default
    main_part = re.sub(r"^www\.", "", hostname).split(".")[0]
    return main_part[:1].upper() + main_part[1:] if main_part else default
