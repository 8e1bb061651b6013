"""
                WhatsApp Restaurant Assistant

Conversational ordering, table booking, feedback and complaint intake
for restaurants, driven by inbound WhatsApp messages.

Author: Khalil_Bannouri
Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
__author__ = "Khalil_Bannouri"
