"""NSQ 异常"""

from apix.common.exceptions import ApixException


class NSQError(ApixException):
    def __init__(self, message: str, exit_code: int | None = None):
        self.exit_code = exit_code
        super().__init__(message, error_code="NSQ_ERROR")
