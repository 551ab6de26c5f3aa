"""
Explicit success/failure values returned by the service layer.

Services return ``Ok(value)`` or ``Err(error)`` instead of raising for
expected business failures (wrong password, suspended account, missing
user). Route handlers call ``unwrap()``; an ``Err`` re-raises its error so
the application's exception handler turns it into the HTTP response.
"""
from dataclasses import dataclass
from typing import Generic, NoReturn, TypeVar, Union

from account_service.errors import AppError

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Err:
    error: AppError

    @property
    def ok(self) -> bool:
        return False

    def unwrap(self) -> NoReturn:
        raise self.error


Result = Union[Ok[T], Err]
