"""An exception that collects several errors."""

from __future__ import annotations

from collections.abc import Sequence


def list_format(errors: Sequence[BaseException]) -> str:
    """Format errors as a count followed by a bullet-point list."""
    if len(errors) == 1:
        return f"1 error occurred:\n\t* {errors[0]}"
    points = "\n\t".join(f"* {err}" for err in errors)
    return f"{len(errors)} errors occurred:\n\t{points}"


class MultiError(Exception):
    """Aggregate of several errors."""

    def __init__(self, errors: Sequence[BaseException] | None = None) -> None:
        super().__init__()
        self.errors: list[BaseException] = []
        if errors:
            self.append(*errors)

    def append(self, *args: BaseException | None) -> "MultiError":
        """Add errors, flattening nested MultiErrors and skipping None."""
        for err in args:
            if err is None:
                continue
            if isinstance(err, MultiError):
                self.errors.extend(err.errors)
            else:
                self.errors.append(err)
        return self

    def error_or_none(self) -> "MultiError | None":
        """Return self if any error was collected, else None."""
        return self if self.errors else None

    def __len__(self) -> int:
        return len(self.errors)

    def __str__(self) -> str:
        return list_format(self.errors)


def append(err: BaseException | None, *args: BaseException | None) -> MultiError:
    """Append errors to err, turning it into a MultiError if needed."""
    if isinstance(err, MultiError):
        return err.append(*args)
    return MultiError().append(err, *args)