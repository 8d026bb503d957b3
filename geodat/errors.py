# geodat/errors.py


class GeoDatError(Exception):
    """Base class for every error raised by geodat."""


class InputFileNotFoundError(GeoDatError, FileNotFoundError):
    def __init__(self, path):
        self.path = path
        super().__init__(f"Input file {path} does not exist.")


class InvalidCidrError(GeoDatError, ValueError):
    pass


class CidrSourceError(GeoDatError):
    pass
