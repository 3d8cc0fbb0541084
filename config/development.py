from .base import *

DEBUG = True

EMAIL_BACKEND = os.environ.get("EMAIL_BACKEND", "django.core.mail.backends.console.EmailBackend")

# Verbose service logging for development
LOGGING["loggers"]["apps"]["level"] = "DEBUG"
