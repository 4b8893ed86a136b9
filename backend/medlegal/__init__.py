"""
Medico-legal report builder backend.
"""

__version__ = "1.0.0"
