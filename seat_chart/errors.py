class SeatChartError(Exception):
    """Base class for errors a user can recover from."""


class CapacityError(SeatChartError):
    def __init__(self, roster_size, available, message=None):
        self.roster_size = roster_size
        self.available = available
        super().__init__(
            message
            or f"Not enough seats: {roster_size} students but only {available} seats available"
        )


class FormatError(SeatChartError):
    pass
