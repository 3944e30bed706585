"""Client for the project-collaboration backend: groups, projects and tasks."""

__version__ = "0.1.0"
