# wsgi.py
from access_admin import create_app

app = create_app()
