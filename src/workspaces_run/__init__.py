"""Run a script in every workspace of a monorepo."""

__version__ = "0.1.0"
