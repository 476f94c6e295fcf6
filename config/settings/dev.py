"""Development settings for StudioReserve project.

This module extends the base settings with development specific
configuration, such as enabling debug, allowing all hosts and using
verbose engine logging. Do not use these settings in production!
"""

from .base import *  # noqa: F401,F403

# Enable debug mode for development
DEBUG = True

# Allow all hosts in development
ALLOWED_HOSTS = ['*']

# Log engine decisions at DEBUG during development
LOG_LEVEL = "DEBUG"
LOGGING["loggers"]["apps"]["level"] = LOG_LEVEL  # noqa: F405
LOGGING["loggers"]["shared"]["level"] = LOG_LEVEL  # noqa: F405
