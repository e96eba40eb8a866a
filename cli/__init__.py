"""CLI package for the library circulation service"""
from .main import cli

__all__ = ['cli']
