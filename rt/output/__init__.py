"""Output and prompt abstraction layer."""

from .console import ConsoleProtocol, MockConsole, RichConsole, Style
from .prompt import Choice, MockPrompt, PromptProtocol, TyperPrompt

__all__ = [
    "Choice",
    "ConsoleProtocol",
    "MockConsole",
    "MockPrompt",
    "PromptProtocol",
    "RichConsole",
    "Style",
    "TyperPrompt",
]
