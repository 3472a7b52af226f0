import os
import sys
from pathlib import Path

from django.core.wsgi import get_wsgi_application

# apps/ holds the Django apps ("orders", "monitoring")
APPS_DIR = str(Path(__file__).resolve().parent.parent / "apps")
if APPS_DIR not in sys.path:
    sys.path.insert(0, APPS_DIR)

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

application = get_wsgi_application()
