import re

from listing_agent.core.exceptions import ConfigurationError

DEFAULT_FILE_FILTER = r"[^\.].*"


class PathFilter:
    """
    Include rule for listed files.

    The pattern must match the whole base name of a file. Directories are
    never passed through the filter.
    """

    def __init__(self, pattern: str = DEFAULT_FILE_FILTER):
        try:
            self._regex = re.compile(pattern)
        except re.error as e:
            raise ConfigurationError(f"Invalid file filter '{pattern}': {e}") from e
        self.pattern = pattern

    def matches(self, base_name: str) -> bool:
        return self._regex.fullmatch(base_name) is not None

    def __repr__(self) -> str:
        return f"PathFilter({self.pattern!r})"
