"""Notifications app package.

E-mails to guests about their reservations: confirmation, modification
and deletion. Sent by Celery tasks enqueued after the booking
transaction commits, so a slow or failing mail server never affects the
booking itself.
"""
