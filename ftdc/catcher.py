"""Collect errors so that work can continue past individual failures."""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterable
from typing import Any, Optional


class CatcherError(Exception):
    """An error created by, or resolved from, a :class:`Catcher`."""

    def __init__(self, message: str, errors: Iterable[BaseException] = ()) -> None:
        super().__init__(message)
        self.errors: list[BaseException] = list(errors)


def _format(form: str, args: tuple[Any, ...]) -> str:
    return form % args if args else form


class Catcher:
    """A thread-safe collector of errors.

    Adding ``None`` is always a no-op, so results of operations that may or
    may not have failed can be handed over without checking them first.
    """

    def __init__(self) -> None:
        self._errors: list[BaseException] = []
        self._lock = threading.Lock()

    def add(self, err: Optional[BaseException]) -> None:
        """Record ``err`` unless it is ``None``."""
        if err is None:
            return
        if not isinstance(err, BaseException):
            raise TypeError(f"expected an exception, got {type(err).__name__}")
        with self._lock:
            self._errors.append(err)

    def add_when(self, cond: bool, err: Optional[BaseException]) -> None:
        """Record ``err`` only when ``cond`` is true."""
        if cond:
            self.add(err)

    def extend(self, errs: Optional[Iterable[Optional[BaseException]]]) -> None:
        """Record every error in ``errs``, skipping ``None`` entries."""
        if not errs:
            return
        kept = [err for err in errs if err is not None]
        for err in kept:
            if not isinstance(err, BaseException):
                raise TypeError(f"expected an exception, got {type(err).__name__}")
        with self._lock:
            self._errors.extend(kept)

    def extend_when(
        self, cond: bool, errs: Optional[Iterable[Optional[BaseException]]]
    ) -> None:
        """Record the errors in ``errs`` only when ``cond`` is true."""
        if cond:
            self.extend(errs)

    def __len__(self) -> int:
        with self._lock:
            return len(self._errors)

    def has_errors(self) -> bool:
        """Return True if any error has been recorded."""
        return len(self) > 0

    def __str__(self) -> str:
        with self._lock:
            return "\n".join(str(err) for err in self._errors)

    def resolve(self) -> None:
        """Raise a :class:`CatcherError` summarising all recorded errors, if any."""
        with self._lock:
            errors = list(self._errors)
        if errors:
            raise CatcherError("\n".join(str(err) for err in errors), errors)

    def errors(self) -> list[BaseException]:
        """Return a copy of the recorded errors."""
        with self._lock:
            return list(self._errors)

    def new(self, message: str) -> None:
        """Record a new error with ``message`` unless the message is empty."""
        if message:
            self.add(CatcherError(message))

    def new_when(self, cond: bool, message: str) -> None:
        """Record a new error only when ``cond`` is true."""
        if cond:
            self.new(message)

    def errorf(self, form: str, *args: Any) -> None:
        """Record an error whose message is ``form`` formatted with ``args``."""
        if not form:
            return
        if not args:
            self.new(form)
            return
        self.add(CatcherError(form % args))

    def errorf_when(self, cond: bool, form: str, *args: Any) -> None:
        """Record a formatted error only when ``cond`` is true."""
        if cond:
            self.errorf(form, *args)

    def wrap(self, err: Optional[BaseException], message: str) -> None:
        """Record ``err`` annotated with ``message``; ``None`` is ignored."""
        if err is None:
            return
        wrapped = CatcherError(f"{message}: {err}" if message else str(err))
        wrapped.__cause__ = err
        self.add(wrapped)

    def wrapf(self, err: Optional[BaseException], form: str, *args: Any) -> None:
        """Record ``err`` annotated with a formatted message."""
        if err is None:
            return
        self.wrap(err, _format(form, args))

    def check(self, fn: Callable[[], Any]) -> None:
        """Call ``fn`` and record what it raises or returns as an error."""
        try:
            result = fn()
        except Exception as exc:  # noqa: BLE001 - collecting is the point
            self.add(exc)
            return
        if isinstance(result, BaseException):
            self.add(result)

    def check_when(self, cond: bool, fn: Callable[[], Any]) -> None:
        """Run :meth:`check` only when ``cond`` is true."""
        if cond:
            self.check(fn)