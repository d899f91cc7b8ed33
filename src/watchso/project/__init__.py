"""Project layout: manifests, workspaces and the program map."""

from watchso.project.manifest import CargoManifest, Package, Workspace, read_cargo_toml
from watchso.project.map import ProgramName, ProjectMap
from watchso.project.workspace import (
    filter_workspace_programs,
    get_program_name_path_map,
    get_watch_pathset,
    glob_dirs,
)

__all__ = [
    # Manifests
    "CargoManifest",
    "Package",
    "Workspace",
    "read_cargo_toml",
    # Program map
    "ProgramName",
    "ProjectMap",
    # Workspaces
    "filter_workspace_programs",
    "get_program_name_path_map",
    "get_watch_pathset",
    "glob_dirs",
]
