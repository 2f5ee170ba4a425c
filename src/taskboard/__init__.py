"""Taskboard — personal task boards behind a small JSON API.

Users sign up with email/password or Google, then keep boards of tasks
with status and progress tracking. Every board and task is scoped to
the user who owns it.
"""

__version__ = "0.1.0"
