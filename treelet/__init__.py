"""
Treelet: mirror selected folders of a GitLab repository to local disk.
"""

from .interfaces.api import GitLabMirror
from .models import DownloadResult, DownloadStatus, FilterCriteria, MirrorConfig

__version__ = "0.1.0"

__all__ = [
    "GitLabMirror",
    "DownloadResult",
    "DownloadStatus",
    "FilterCriteria",
    "MirrorConfig",
    "__version__",
]
