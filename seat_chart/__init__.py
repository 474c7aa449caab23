from seat_chart.errors import CapacityError, FormatError, SeatChartError
from seat_chart.models import ClassData, Page, Seat, TagType, Workspace

__version__ = "1.0.0"

__all__ = [
    "CapacityError",
    "ClassData",
    "FormatError",
    "Page",
    "Seat",
    "SeatChartError",
    "TagType",
    "Workspace",
]
