# domo/routers/__init__.py

from . import auth
from . import invitations
from . import mobile

__all__ = [
    "auth",
    "invitations",
    "mobile",
]
