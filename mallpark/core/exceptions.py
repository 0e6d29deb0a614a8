class CarParkException(Exception):
    def __init__(self, detail: str = "An error occurred"):
        super().__init__(detail)
        self.detail = detail


class ActiveSessionError(CarParkException):
    def __init__(self, detail: str = "Cannot calculate fee for an active session"):
        super().__init__(detail=detail)


class InvalidArgumentError(CarParkException):
    def __init__(self, detail: str = "Invalid argument"):
        super().__init__(detail=detail)


class NotFoundError(CarParkException):
    def __init__(self, detail: str = "Resource not found"):
        super().__init__(detail=detail)


class ConflictError(CarParkException):
    def __init__(self, detail: str = "Resource conflict"):
        super().__init__(detail=detail)


class ValidationError(CarParkException):
    def __init__(self, detail: str = "Validation error"):
        super().__init__(detail=detail)


class SpaceUnavailableError(CarParkException):
    def __init__(self, detail: str = "No compatible parking slot is available"):
        super().__init__(detail=detail)
