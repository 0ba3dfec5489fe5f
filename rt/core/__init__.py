"""Core types shared by every release component."""

from .config import ConfigError, GithubConfig, NpmPackage, ProjectConfig, ReleaseConfig, load_config
from .errors import ErrorCode
from .result import Err, Ok, Result

__all__ = [
    # config
    "ConfigError",
    "GithubConfig",
    "NpmPackage",
    "ProjectConfig",
    "ReleaseConfig",
    "load_config",
    # errors
    "ErrorCode",
    # result
    "Err",
    "Ok",
    "Result",
]
