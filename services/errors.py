class LedgerError(ValueError):
    """Domain validation failure; the message is shown to the user as-is."""


class DuplicateNameError(LedgerError):
    pass


class UnknownStorageError(LedgerError):
    pass


class EmptyHistoryError(LedgerError):
    pass


class NoCurrentLedgerError(LedgerError):
    def __init__(self, message: str = "You are currently not in a storage, please use the 'go to' command."):
        super().__init__(message)


class MergeRejectedError(LedgerError):
    pass


class InvalidIngredientError(LedgerError):
    pass
