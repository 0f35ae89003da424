"""Booking slot rules engine and REST glue for the legal-services portal."""
