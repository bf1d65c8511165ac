import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "traction_rec.settings_template")

application = get_wsgi_application()
