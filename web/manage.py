#!/usr/bin/env python
import os
import sys
from pathlib import Path


def main():
    # apps/ holds the Django apps ("orders", "monitoring")
    apps_dir = str(Path(__file__).resolve().parent / "apps")
    if apps_dir not in sys.path:
        sys.path.insert(0, apps_dir)
    os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")
    from django.core.management import execute_from_command_line

    execute_from_command_line(sys.argv)


if __name__ == "__main__":
    main()
