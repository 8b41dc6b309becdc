"""
Service layer for Treelet: the GitLab API client and the local writer.
"""

from .gitlab_api import GitLabAPIService
from .download import DownloadService

__all__ = [
    "GitLabAPIService",
    "DownloadService",
]
