"""Time Tracker package.

Organized by feature modules (users, categories, sessions, calendar, reports)
with a thin Flask controller layer on top of service/repository layers.
"""
