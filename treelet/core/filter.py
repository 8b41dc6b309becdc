"""
Folder filtering for tree traversal.
"""

from ..models import DownloadTarget, FilterCriteria


class FilterEngine:
    """
    Decides which folders the traversal descends into.

    Only folders are filtered, and each folder level is checked against
    its own full path. Files inside a descended folder are always kept.
    """

    def __init__(self, criteria: FilterCriteria):
        self.criteria = criteria

    def should_descend(self, full_path: str) -> bool:
        return self.criteria.matches_path(full_path)

    def should_include(self, target: DownloadTarget) -> bool:
        if not target.is_directory:
            return True
        return self.should_descend(target.path)

    def describe(self) -> str:
        if self.criteria.is_empty:
            return "No filter applied. Downloading all folders."
        return (
            "Filtering: Only downloading folders that match "
            f"{self.criteria}"
        )
