"""Symptom analysis relay for the patient health app."""

__version__ = "1.0.0"
