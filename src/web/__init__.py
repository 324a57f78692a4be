"""HTTP JSON API for the voting app."""
