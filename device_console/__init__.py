"""
Device console: admin client for simulated Regula and RFID devices.
"""

__version__ = "0.1.0"
