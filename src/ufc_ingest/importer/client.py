"""Extract reader for local files and HTTP(S) URLs."""

from pathlib import Path
from typing import Optional, Union

import requests

from .errors import StructuralError

# Default headers to mimic browser
HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
        "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/csv,text/plain;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}


def is_remote(source: Union[str, Path]) -> bool:
    """True for http:// and https:// sources."""
    return str(source).lower().startswith(("http://", "https://"))


class ExtractClient:
    """Reads extract text from disk or over HTTP."""

    def __init__(self, session: Optional[requests.Session] = None, timeout: float = 30):
        """Initialize client with an optional pre-configured session."""
        self.session = session or requests.Session()
        self.session.headers.update(HEADERS)
        self.timeout = timeout

    def fetch(self, url: str) -> str:
        """Download an extract and return its text."""
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise StructuralError(f"Cannot download extract {url}: {e}") from e
        response.encoding = response.encoding or "utf-8"
        return response.text

    def read(self, source: Union[str, Path]) -> str:
        """
        Read the full text of an extract.

        Raises:
            StructuralError: if the extract is missing or unreadable
        """
        if is_remote(source):
            return self.fetch(str(source))

        path = Path(source)
        if not path.is_file():
            raise StructuralError(f"Extract not found: {path}")
        try:
            return path.read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as e:
            raise StructuralError(f"Cannot read extract {path}: {e}") from e
