"""Tour booking backend: catalog, tour dates, seat-limited bookings and check-in."""

__version__ = "1.0.0"
