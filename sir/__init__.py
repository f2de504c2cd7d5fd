"""SIR - Stateful Incremental Reasoner.

Drives an external AI agent CLI against a small set of project state files.
"""

__version__ = "0.3.0"
