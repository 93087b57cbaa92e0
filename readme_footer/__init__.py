"""
README Footer - Add or replace a standard footer in the README files of an organization's repositories.
"""

from .models import Repository, RepositoryStatus, Status
from .config import Config, load_config
from .footer import FooterMerger
from .client import GitHubClient
from .sources import FailedRepositoriesFile, OrganizationRepositorySource, is_valid_repositories
from .prompts import AutoPrompter, ConsolePrompter, Prompter
from .workflow import ReadmeUpdater
from .orchestrator import BatchOrchestrator
from .main import main

__all__ = [
    'Repository',
    'RepositoryStatus',
    'Status',
    'Config',
    'load_config',
    'FooterMerger',
    'GitHubClient',
    'FailedRepositoriesFile',
    'OrganizationRepositorySource',
    'is_valid_repositories',
    'Prompter',
    'AutoPrompter',
    'ConsolePrompter',
    'ReadmeUpdater',
    'BatchOrchestrator',
    'main'
]
