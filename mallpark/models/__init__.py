from mallpark.models.parking import EntryPoint, ParkingSlot
from mallpark.models.session import ParkingSession
from mallpark.models.vehicle import Vehicle

__all__ = [
    "EntryPoint",
    "ParkingSlot",
    "Vehicle",
    "ParkingSession",
]
