from abc import ABC, abstractmethod


class LibraryProvider(ABC):
    @abstractmethod
    def fetch_all(self):
        """Return every raw record of the library as one complete list."""
