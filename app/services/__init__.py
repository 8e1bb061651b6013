"""
Services Module

Contains the conversation engine and the collaborators it depends on,
following the hybrid architecture pattern: each collaborator has a Mock
(development) and a SQL (production) implementation.

Services:
    - catalog: Restaurant menus
    - persistence: Orders, bookings, feedback and complaints
    - routing: Inbound WhatsApp address -> restaurant
    - whatsapp: Sessions, flows, dispatcher and webhook handler
"""
