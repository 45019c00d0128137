"""Shared exception types for the tracker."""


class OrgFetchError(Exception):
    """Raised when the Hub listing for one organization cannot be retrieved.

    Non-fatal: the fetcher logs it and degrades to an empty listing for
    that organization.
    """

    def __init__(self, org: str, details: str) -> None:
        self.org = org
        self.details = details
        super().__init__(f"Could not fetch models for {org}: {details}")


class CacheError(Exception):
    """Raised when a cached dataset cannot be read or written.

    Never escapes the cache layer; callers see a cache miss instead.
    """


class FetchCycleError(Exception):
    """Raised when a whole fetch cycle fails and no dataset can be built.

    There is no automatic retry. Recovery is an explicit reload.
    """
