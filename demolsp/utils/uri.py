from pathlib import Path
from urllib.parse import quote, unquote, urlparse


def path_to_uri(path: str | Path) -> str:
    path = Path(path).resolve()
    return "file://" + quote(str(path), safe="/:")


def uri_to_path(uri: str) -> Path:
    parsed = urlparse(uri)
    if parsed.scheme != "file":
        raise ValueError(f"Not a file URI: {uri}")
    return Path(unquote(parsed.path))


def display_uri(uri: str, cwd: Path | None = None) -> str:
    """Render a URI for humans: a path relative to cwd when possible."""
    try:
        path = uri_to_path(uri)
    except ValueError:
        return uri
    cwd = (cwd or Path.cwd()).resolve()
    try:
        return str(path.relative_to(cwd))
    except ValueError:
        return str(path)
