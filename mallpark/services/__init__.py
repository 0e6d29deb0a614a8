from mallpark.services import fee, parking, session, vehicle

__all__ = [
    "fee",
    "parking",
    "vehicle",
    "session",
]
