# PATH: /Taskboard/taskboard/__init__.py
"""Django project package for the team task board."""
