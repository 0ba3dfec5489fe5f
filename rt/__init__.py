"""Release-train orchestration for multi-branch npm projects."""

__version__ = "0.1.0"
