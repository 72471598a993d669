"""
CLI module - typer application and console front-end
"""
from .commands import app, main
from .interface import CLIInterface

__all__ = ["app", "main", "CLIInterface"]
