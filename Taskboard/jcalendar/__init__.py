"""Jalali calendar app: date conversion and task month grids."""
