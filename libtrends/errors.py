class LibraryFetchError(Exception):
    """The remote library could not be retrieved in full."""

    def __init__(self, message: str, status: int = None):
        super().__init__(message)
        self.status = status
