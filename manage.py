#!/usr/bin/env python
"""
Command line entry point for the rehab center backend.

Sets ``rehabcenter.settings`` as the default settings module and hands
over to Django's management utility, e.g. ``python manage.py migrate`` or
``python manage.py ensure_default_users``.
"""
import os
import sys


def main() -> None:
    """Run administrative tasks for the Django project."""
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'rehabcenter.settings')
    try:
        from django.core.management import execute_from_command_line  # type: ignore
    except ImportError as exc:
        raise ImportError(
            "Couldn't import Django. Is it installed and available on your "
            "PYTHONPATH? Did you forget to activate a virtual environment?"
        ) from exc
    execute_from_command_line(sys.argv)


if __name__ == '__main__':
    main()
