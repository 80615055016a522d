from __future__ import annotations


class ForumWatchError(Exception):
    """Base class for all errors raised by the crawler."""


class BrowserLaunchError(ForumWatchError):
    """The browser session could not be acquired. Fatal for the whole run."""


class ObstacleError(ForumWatchError):
    """A challenge page was still present after all retries."""


class StateStoreError(ForumWatchError):
    """A state store backend failed to read or write."""
