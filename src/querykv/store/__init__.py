"""Repository implementations that keep records in process memory."""
