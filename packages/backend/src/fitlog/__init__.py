"""Fitlog — workout tracking service.

Users register, log in for an opaque bearer token, and record workouts
made of ordered exercise entries. Only a workout's owner may change it.
"""

__version__ = "0.1.0"
