"""slimpack — trim serverless deployment archives down to what each function needs."""

__version__ = "0.1.0"
