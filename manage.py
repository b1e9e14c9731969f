#!/usr/bin/env python
"""Command line entry point for the HMIS backend.

Common commands::

    python manage.py makemigrations clinic && python manage.py migrate
    python manage.py ensure_test_users
    python manage.py populate_data --patients 25
    python manage.py refresh_caches
"""
import os
import sys


def main() -> None:
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'hmis.settings')
    try:
        from django.core.management import execute_from_command_line  # type: ignore
    except ImportError as exc:
        raise ImportError(
            "Django is not installed. Install the project with "
            "`pip install -e .[test]` inside a virtual environment."
        ) from exc
    execute_from_command_line(sys.argv)


if __name__ == '__main__':
    main()
