RUNTIME_ERROR_CODE = 2
CLIENT_ERROR_CODE = 3
CONFIG_ERROR_CODE = 4


class StorerError(Exception):
    exit_code = RUNTIME_ERROR_CODE


class ConfigurationError(StorerError):
    exit_code = CONFIG_ERROR_CODE


class ClientConstructionError(StorerError):
    exit_code = CLIENT_ERROR_CODE


class DecodeError(StorerError):
    pass


class UploadError(StorerError):
    pass


class BackupError(StorerError):
    pass


class StoreError(StorerError):
    def __init__(self, message: str, failures: list[tuple[str, Exception]] | None = None) -> None:
        super().__init__(message)
        self.failures = failures or []
