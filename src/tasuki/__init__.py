"""
tasuki: one task list over plain-text stores.

Components:
- tasks/task_models.py: TaskRecord and value types
- backends/: file codecs, vault scanner, line mutator, backend manager
- config.py: environment-driven settings
- cli/: composition root and command line
"""

__version__ = "0.1.0"
