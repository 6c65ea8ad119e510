"""Event Registration package.

This package is organized by feature modules (users, events, forms,
inscriptions, notifications, ...) with a thin Flask JSON controller layer on
top of service and repository layers.
"""
from .main import create_app

__all__ = ["create_app"]
