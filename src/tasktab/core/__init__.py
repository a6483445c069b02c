"""State engine, persistence, classification and view projection."""
