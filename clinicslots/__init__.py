"""
clinicslots - availability and scheduling engine for clinic appointments.
"""

__version__ = "0.1.0"
