"""
Typed Coinbase v1 JSON entities.
"""

from .base import *
from .responses import *
from .requests import *
from .auth import *

from . import base, responses, requests, auth

__all__ = base.__all__ + responses.__all__ + requests.__all__ + auth.__all__
