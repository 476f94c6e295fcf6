"""Users app package.

Defines the platform user with one of three roles (admin, studio owner,
photographer) and the phone contact used for booking notifications.
Use ``apps.users.models.User`` as the AUTH_USER_MODEL throughout the
project.
"""
