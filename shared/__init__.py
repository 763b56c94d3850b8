"""
Shared Kernel

Base classes and utilities shared by the rooms, configuration, bookings
and notifications apps: domain events, the DateRange value object, the
booking error taxonomy, the Unit of Work and the message bus.
"""
