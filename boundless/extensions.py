"""Extension instances bound to the app in create_app."""

from flask_mail import Mail

mail = Mail()
