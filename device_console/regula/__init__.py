"""
Regula passport devices: remote API, edit session, photo manager.
"""

from .page import RegulaPage
from .photos import PhotoManager
from .remote import RegulaApi
from .session import RegulaEditSession

__all__ = ["RegulaApi", "RegulaEditSession", "RegulaPage", "PhotoManager"]
