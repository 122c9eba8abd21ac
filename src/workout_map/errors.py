class WorkoutError(Exception):
    """Base class for every recoverable error the app reports to the user."""


class ValidationError(WorkoutError):
    pass


class NoMapEventError(WorkoutError):
    def __init__(self, message: str = "Please click on the map first!"):
        super().__init__(message)


class NotFoundError(WorkoutError):
    def __init__(self, workout_id: str):
        super().__init__(f"No workout with id {workout_id!r}")
        self.workout_id = workout_id


class DuplicateWorkoutError(WorkoutError):
    def __init__(self, workout_id: str):
        super().__init__(f"A workout with id {workout_id!r} already exists")
        self.workout_id = workout_id


class GeolocationError(WorkoutError):
    def __init__(self, message: str = "Could not get your position"):
        super().__init__(message)


class StorageCorruptError(WorkoutError):
    pass
