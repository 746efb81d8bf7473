from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

T = TypeVar('T')
U = TypeVar('U')
E = TypeVar('E')


class Maybe(Generic[T]):
    """Lookup result: Some(value) when found, Nothing() otherwise."""

    def is_some(self) -> bool:
        return isinstance(self, Some)

    def is_none(self) -> bool:
        return not self.is_some()

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return Some(f(self.value)) if self.is_some() else self

    def bind(self, f: Callable[[T], 'Maybe[U]']) -> 'Maybe[U]':
        return f(self.value) if self.is_some() else self

    def get_or_else(self, default):
        return self.value if self.is_some() else default


@dataclass(frozen=True)
class Some(Maybe[T]):
    value: T


@dataclass(frozen=True)
class Nothing(Maybe[T]):
    pass


class Either(Generic[E, T]):
    """Right carries a new value, Left carries an error dict for the user.

    Error dicts always have "error" (a stable code) and "message".
    """

    def is_right(self) -> bool:
        return isinstance(self, Right)

    def is_left(self) -> bool:
        return not self.is_right()

    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        return Right(f(self.value)) if self.is_right() else self

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return f(self.value) if self.is_right() else self

    def get_or_else(self, default):
        return self.value if self.is_right() else default

    def get_error(self) -> E:
        if self.is_right():
            raise ValueError("Right carries no error")
        return self.error


@dataclass(frozen=True)
class Right(Either[E, T]):
    value: T


@dataclass(frozen=True)
class Left(Either[E, T]):
    error: E


def fail(error: str, message: str, **details) -> Left:
    return Left({"error": error, "message": message, **details})
