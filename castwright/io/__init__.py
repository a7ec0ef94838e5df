"""Input/output components for Castwright.

This package contains screenplay discovery and `PROJECT.md` persistence.
"""

from .discovery import discover_files
from .project_file import ProjectDocument, ProjectFile, parse_project, render_project

__all__ = [
    "discover_files",
    "ProjectDocument",
    "ProjectFile",
    "parse_project",
    "render_project",
]
