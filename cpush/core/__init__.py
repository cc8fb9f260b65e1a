"""Core domain types and logic."""

from .errors import ErrorCode
from .project import CodePushConfig, Project, ProjectError, resolve_base_url
from .result import Err, Ok, Result, is_err, is_ok

__all__ = [
    # errors
    "ErrorCode",
    # project
    "CodePushConfig",
    "Project",
    "ProjectError",
    "resolve_base_url",
    # result
    "Err",
    "Ok",
    "Result",
    "is_err",
    "is_ok",
]
