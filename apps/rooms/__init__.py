"""Rooms app package.

Holds the static room catalog of the chalet and the admin blockages that
take rooms (or the whole chalet) out of service independently of guest
bookings.
"""
