class HttpError(Exception):
    """An error that maps to an HTTP status code and a user-facing message."""

    def __init__(self, status_code, message=''):
        super().__init__(message)
        self.status_code = status_code
        self.message = message

    def __str__(self):
        return f'{self.status_code}: {self.message}'


class ScheduleNotFound(HttpError):
    def __init__(self, schedule_id):
        super().__init__(404, f'Schedule {schedule_id} was not found.')
        self.schedule_id = schedule_id
