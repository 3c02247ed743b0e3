"""
Language-specific code generators.

This module contains the generator for each supported target.
"""

from .java import JavaGenerator, create_generator as create_java_generator

__all__ = ["JavaGenerator", "create_java_generator"]
