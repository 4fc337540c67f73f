"""Core data types and tuning constants."""
