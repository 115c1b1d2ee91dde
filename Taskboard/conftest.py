import os

import django

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'taskboard.settings')
django.setup()
