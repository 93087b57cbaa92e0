"""
Errors that abort a whole run.

Remote failures never reach this level; they are turned into a failed
repository status by the update workflow.
"""


class ReadmeFooterError(Exception):
    """Base class for errors that stop the updater before processing starts."""


class ConfigError(ReadmeFooterError):
    """Raised when required configuration is missing or malformed."""


class RepositoryListError(ReadmeFooterError):
    """Raised when the list of repositories to process is empty or invalid."""
