"""Template tags for the calendar app.

Import side effects are not required here; Django discovers the modules
in this package when ``{% load jalali_filters %}`` is used.
"""
