"""
Fake RFID card devices: remote API, create dialog and inline editor.
"""

from .editing import RfidCreateForm, RfidInlineEditor
from .page import RfidPage
from .remote import RfidApi

__all__ = ["RfidApi", "RfidCreateForm", "RfidInlineEditor", "RfidPage"]
