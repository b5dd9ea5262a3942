"""examdeck: self-paced exam study platform."""
