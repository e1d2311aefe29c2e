import re
from typing import Iterable, List, Optional
from urllib.parse import urlparse

_QUERY_OR_FRAGMENT = re.compile(r"[?#]")


class LinkNormalizer:
    """Canonicalizes site-relative paths so every page is scanned once."""

    @staticmethod
    def canonicalize(path) -> Optional[str]:
        """
        Canonical form of a single path, or None when the input is unusable.

        Query string and fragment are dropped, a leading "/" is ensured and a
        trailing "/" is removed unless the path is the root itself.
        """
        if not path or not isinstance(path, str):
            return None

        path = path.strip()
        if not path:
            return None

        path = _QUERY_OR_FRAGMENT.split(path, maxsplit=1)[0]

        if not path.startswith("/"):
            path = "/" + path

        while len(path) > 1 and path.endswith("/"):
            path = path[:-1]

        return path

    @staticmethod
    def normalize(raw_paths: Iterable) -> List[str]:
        """
        Normalize, deduplicate and sort paths, with "/" always first.

        Args:
            raw_paths: Any iterable of path strings; non-strings and blanks are
                dropped silently

        Returns:
            Sorted list of unique canonical paths
        """
        normalized = set()
        for raw in raw_paths or []:
            path = LinkNormalizer.canonicalize(raw)
            if path:
                normalized.add(path)

        result = sorted(normalized)
        if "/" in normalized:
            result.remove("/")
            result.insert(0, "/")
        return result

    @staticmethod
    def to_path(url: str) -> Optional[str]:
        """Path component of an absolute URL, canonicalized."""
        try:
            parsed = urlparse(url)
        except ValueError:
            return None
        return LinkNormalizer.canonicalize(parsed.path or "/")
