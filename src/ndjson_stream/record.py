from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Record(Generic[T]):
    """Outcome for one line (or one failed read of the source).

    Exactly one of `value`/`error` is meaningful: `error is None` means the line
    decoded successfully (the value itself may legitimately be `None`, e.g. a
    JSON `null` line).
    """

    line_number: int
    raw: bytes | None
    value: T | None = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]
