"""
Listing Domain Configuration Objects
Configuration consumed by one listing cycle.
"""
import hashlib
from dataclasses import dataclass, field
from typing import Mapping, Optional, TYPE_CHECKING

from listing_agent.core.exceptions import ConfigurationError
from listing_agent.domains.listing.path_filter import DEFAULT_FILE_FILTER, PathFilter
from listing_agent.utils.path_template import render_path_template

if TYPE_CHECKING:
    from listing_agent.config import Settings


@dataclass(frozen=True)
class ListingConfiguration:
    """Root, recursion flag and filter for one cycle. Built once before each cycle."""

    root_path: str
    recurse: bool = True
    file_filter: str = DEFAULT_FILE_FILTER
    max_concurrent_listings: int = 8
    path_filter: PathFilter = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if not self.root_path or not self.root_path.strip():
            raise ConfigurationError("Root path is required for listing")
        if self.max_concurrent_listings < 1:
            raise ConfigurationError("max_concurrent_listings must be at least 1")
        object.__setattr__(self, "path_filter", PathFilter(self.file_filter))

    @property
    def listing_key(self) -> str:
        """
        Fingerprint of everything that invalidates the cursor when changed:
        the root path, the recursion flag and the filter pattern.
        """
        raw = f"{self.root_path}\x00{self.recurse}\x00{self.file_filter}"
        return hashlib.sha256(raw.encode("utf-8")).hexdigest()[:16]

    @classmethod
    def from_settings(
        cls, settings: "Settings", variables: Optional[Mapping[str, str]] = None
    ) -> "ListingConfiguration":
        template_values = dict(settings.root_path_variables)
        if variables:
            template_values.update(variables)
        return cls(
            root_path=render_path_template(settings.root_path, template_values),
            recurse=settings.recurse,
            file_filter=settings.file_filter,
            max_concurrent_listings=settings.max_concurrent_listings,
        )
