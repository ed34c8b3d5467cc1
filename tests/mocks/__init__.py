"""Test doubles for the order engine's collaborators."""
