REMOTE_SEPARATOR = "/"
ROOT_RELATIVE_PATH = "./"


def combine_path(first: str, second: str) -> str:
    """Join two remote path parts with exactly one separator between them."""
    if first.endswith(REMOTE_SEPARATOR):
        return first + second.lstrip(REMOTE_SEPARATOR)
    return first + REMOTE_SEPARATOR + second.lstrip(REMOTE_SEPARATOR)


def relative_directory(root_path: str, directory: str) -> str:
    """
    Path of directory relative to the scan root.

    "./" for the root itself, otherwise whatever follows the root prefix,
    e.g. root "/data" and directory "/data/sub" gives "/sub".
    """
    if directory == root_path:
        return ROOT_RELATIVE_PATH
    if directory.startswith(root_path):
        return directory[len(root_path):]
    return directory


def normalize_remote_path(path: str) -> str:
    """Collapse duplicate separators and drop a trailing one (except for "/")."""
    parts = [part for part in path.split(REMOTE_SEPARATOR) if part]
    normalized = REMOTE_SEPARATOR + REMOTE_SEPARATOR.join(parts)
    return normalized


def split_remote_path(path: str):
    """Return (parent, name) for a normalized remote path."""
    normalized = normalize_remote_path(path)
    parent, _, name = normalized.rpartition(REMOTE_SEPARATOR)
    return parent or REMOTE_SEPARATOR, name
