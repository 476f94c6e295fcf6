"""Bookings app package.

Admission of room reservations (conflict check and pricing inside one
transaction) and the booking status machine shared by photographers,
studio owners and administrators.
"""
