"""Resource services; every operation takes the acting user's id explicitly."""
