# leasehold/errors.py
from __future__ import annotations


class LeaseholdError(Exception):
    """Base for every failure the services report to their callers."""

    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFoundError(LeaseholdError):
    status_code = 404

    @classmethod
    def for_id(cls, entity: str, entity_id: int) -> "NotFoundError":
        return cls(f"{entity} not found with id: {entity_id}")


class InvalidArgumentError(LeaseholdError, ValueError):
    status_code = 400


class ConflictError(LeaseholdError):
    status_code = 409


class SynchronizationError(LeaseholdError):
    """
    A lifecycle transition failed after it started writing. The unit of work
    was rolled back; neither the agreement nor the property changed.
    """

    status_code = 500

    def __init__(self, detail: str, *, agreement_id: int, cause: BaseException | None = None):
        super().__init__(detail)
        self.agreement_id = agreement_id
        self.__cause__ = cause
