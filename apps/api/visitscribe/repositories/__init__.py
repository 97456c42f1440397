"""Object store record layout and access."""
