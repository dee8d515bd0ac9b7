# errors.py

class GateError(Exception):
    """Base class for execution-gate errors."""
    pass


# ----- Control Classification -----

class RecoverableGateError(GateError):
    """Errors the host application can recover from (for example by retrying)."""
    pass


class FatalGateError(GateError):
    """Configuration errors that make gating meaningless."""
    pass


# ----- Stored Data Errors -----

class MalformedStoredDataError(RecoverableGateError):
    pass


# ----- Setup Errors -----

class MissingVersionError(FatalGateError):
    pass


# ----- Storage Errors -----

class StorageError(RecoverableGateError):
    pass


class StorageReadError(StorageError):
    pass


class StorageWriteError(StorageError):
    pass
