"""Error types for the backend REST layer."""

AUTH_REQUIRED_MSG = (
    "BitCompass needs authentication. Run `bitcompass login`, "
    "then restart the MCP server in your editor."
)

NOT_CONFIGURED_MSG = (
    "BitCompass is not configured. Run `bitcompass config set supabaseUrl` and "
    "`bitcompass config set supabaseAnonKey`, then `bitcompass login`, "
    "then restart the MCP server in your editor."
)


class BackendError(Exception):
    """Base error for all backend failures."""


class NotConfiguredError(BackendError):
    """The backend URL or anon key is missing."""

    def __init__(self) -> None:
        super().__init__(NOT_CONFIGURED_MSG)


class AuthRequiredError(BackendError):
    """The backend rejected the request for lack of a valid session."""

    def __init__(self) -> None:
        super().__init__(AUTH_REQUIRED_MSG)


class NotFoundError(BackendError):
    """A record addressed by id does not exist."""

    def __init__(self, entity: str, record_id: str) -> None:
        self.entity = entity
        self.record_id = record_id
        super().__init__(f"{entity} with ID {record_id} not found.")
