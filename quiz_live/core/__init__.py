"""Domain models, event decoding and session facades."""
