"""Life Sim: goal arcs, tasks and focus sessions with an AI assistant."""

__version__ = "0.1.0"
