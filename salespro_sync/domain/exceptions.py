"""Domain-specific exceptions — framework-independent."""


class RemoteTableError(Exception):
    """Raised inside the remote table client when a call fails.

    Never escapes the client: every public client method converts it into an
    empty result plus a warning.
    """

    def __init__(self, table: str, status_code: int | None, message: str):
        self.table = table
        self.status_code = status_code
        self.message = message
        label = status_code if status_code is not None else "transport"
        super().__init__(f"[{table}] {label}: {message}")


class UnknownCollectionError(Exception):
    """Raised when a caller names a content collection that does not exist."""

    def __init__(self, collection: str):
        self.collection = collection
        super().__init__(f"Unknown content collection '{collection}'")
