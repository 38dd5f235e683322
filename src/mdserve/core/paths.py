"""Request path resolution confined to the served root."""

from pathlib import Path

from mdserve.errors import PathTraversalError


def resolve_path(root: Path, request_path: str) -> Path:
    """Map a request path to an absolute path inside root.

    Both paths are canonicalized (``..`` segments and symlinks resolved) before
    the check. The candidate is accepted only if it is root itself or lies
    below it component-wise, so ``/srv/site`` never admits
    ``/srv/site-other``.

    Args:
        root: Canonical absolute root directory
        request_path: URL path of the request (e.g. "/guide/intro.md")

    Returns:
        Canonical absolute path within root

    Raises:
        PathTraversalError: If the path escapes root or is not a valid path
    """
    try:
        candidate = (root / request_path.lstrip("/")).resolve()
    except (OSError, RuntimeError, ValueError) as e:
        raise PathTraversalError(f"Invalid request path {request_path!r}: {e}") from e

    if candidate != root and not candidate.is_relative_to(root):
        raise PathTraversalError(f"Path outside allowed directory: {request_path!r}")

    return candidate
