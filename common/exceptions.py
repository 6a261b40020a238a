"""Custom exception classes for fragmentation and reconstruction."""


class FragmenterError(Exception):
    """
    Base exception class for all fragmenter errors.
    """
    pass


class ManifestParseError(FragmenterError):
    """
    Raised when a manifest is not valid JSON or does not match the schema.
    """
    pass


class FragmentMissingError(FragmenterError):
    """
    Raised when a fragment named by a manifest is not present on disk.
    """

    def __init__(self, filename: str, directory: str):
        self.filename = filename
        self.directory = directory
        super().__init__(f"Fragment '{filename}' not found in {directory}")


class VerificationError(FragmenterError):
    """
    Raised when a recomputed digest does not match the expected one.

    The reconstructed output, if any, is left in place.
    """

    def __init__(self, expected: str, actual: str, subject: str = "stream"):
        self.expected = expected
        self.actual = actual
        self.subject = subject
        super().__init__(
            f"Digest mismatch for {subject}: expected '{expected}', got '{actual}'"
        )
