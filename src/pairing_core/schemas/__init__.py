"""JSON Schemas shipped with pairing_core."""
