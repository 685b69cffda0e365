"""Attendance Tracker package.

Feature modules (attendance, reports, users, notifications, ...) sit behind a
thin Flask controller layer, with service and repository layers underneath.
"""
