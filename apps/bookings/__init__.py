"""Bookings app package.

This app owns the booking ledger and the reservation path that admits a
booking only while every day of its range stays within the story's
per-day traveller ceiling. The check and the insert share one database
transaction serialised on the story row.
"""
