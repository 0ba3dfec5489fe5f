"""Git operations module.

Usage:
    from rt.git import GitClient

    git = GitClient(project_dir, github=config.github, token=token)
    if git.has_uncommitted_changes():
        ...
"""

from rt.git.repository import GitClient, GitError, output_lines

__all__ = [
    "GitClient",
    "GitError",
    "output_lines",
]
