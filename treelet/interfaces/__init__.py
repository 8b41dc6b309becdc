"""
Public interfaces for Treelet: the Python API and the CLI.
"""

from .api import GitLabMirror

__all__ = ["GitLabMirror"]
