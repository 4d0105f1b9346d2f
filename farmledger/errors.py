# farmledger/errors.py


class FarmLedgerError(Exception):
    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class Unauthorized(FarmLedgerError):
    """No valid session for the operation."""

    status_code = 401

    def __init__(self, detail: str = "Unauthorized"):
        super().__init__(detail)


class NotFoundOrUnauthorized(FarmLedgerError):
    """Referenced row is missing or owned by someone else; the two are not distinguished."""

    status_code = 404


class ValidationError(FarmLedgerError):
    status_code = 422

    def __init__(self, detail: str, errors: list | None = None):
        super().__init__(detail)
        self.errors = errors or []
