"""Domain Layer: errors, value objects, events and ports. No I/O happens here."""
