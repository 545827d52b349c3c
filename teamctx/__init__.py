"""Extract API surfaces, config variables, schema models and commit knowledge from a codebase."""

__version__ = "0.1.0"