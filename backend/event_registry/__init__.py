"""Event registration backend: accounts, events with finite seating, and registrations."""
