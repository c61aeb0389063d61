"""data – upstream data acquisition."""
