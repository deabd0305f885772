"""Guest-house room booking board."""
