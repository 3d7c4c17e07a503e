"""Per-resource sub-clients hung off TeamCityClient."""

from .build_types import BuildTypes
from .projects import Projects
from .server import Server
from .vcs_roots import VcsRoots, new_git_vcs_root

__all__ = ["BuildTypes", "Projects", "Server", "VcsRoots", "new_git_vcs_root"]
