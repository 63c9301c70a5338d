"""
Template engine services — public API.
"""

from .context import RenderContext
from .lexer import Token, TokenType, tokenize
from .parser import Parser
from .template_set import Template, TemplateSet, get_template_set

__all__ = [
    "RenderContext",
    "Token",
    "TokenType",
    "tokenize",
    "Parser",
    "Template",
    "TemplateSet",
    "get_template_set",
]
