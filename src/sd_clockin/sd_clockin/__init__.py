"""SD Clock-In package.

Feature modules (students, terms, schedules, checkins, analytics, ...) each
carry a thin Flask controller on top of service and repository layers.
"""
