"""
Construction errors and diagnostics.

Every ConstructionError is raised while a multiverse is being built,
before any universe has been compiled or run. None of them is
recoverable: construction simply fails and no Multiverse is returned.

Faults raised by user code while a universe runs are NOT wrapped in
anything defined here. They reach the caller of explore() unmodified.
"""

from typing import Iterable, Optional


class ConstructionError(Exception):
    """Raised when an analysis procedure cannot be turned into a multiverse."""

    def __init__(self, message: str, name: Optional[str] = None):
        super().__init__(message)
        self.name = name


class MalformedChoiceError(ConstructionError):
    """A choice marker that is not `identifier = possibilities`."""

    def __init__(self, detail: str = ""):
        message = "choice must assign possible values, e.g. x = choose([1, 2])"
        if detail:
            message = f"{message} (got {detail})"
        super().__init__(message)


class DuplicateChoiceError(ConstructionError):
    def __init__(self, name: str):
        super().__init__(f"choice '{name}' assigned more than once", name)


class UnresolvedPossibilitiesError(ConstructionError):
    """The possibilities expression of a choice failed in the outer environment."""

    def __init__(self, name: str, cause: BaseException):
        super().__init__(
            f"possibilities of choice '{name}' could not be resolved in the outer "
            f"environment: {type(cause).__name__}: {cause}",
            name,
        )


class InsufficientPossibilitiesError(ConstructionError):
    def __init__(self, name: str, count: int):
        super().__init__(
            f"choice '{name}' needs at least 2 possible values, got {count}",
            name,
        )
        self.count = count


class MalformedMeasurementError(ConstructionError):
    """A measurement marker that is not `identifier = expression`."""

    def __init__(self, detail: str = ""):
        message = "measurement must assign a value, e.g. y = measure(x + 2)"
        if detail:
            message = f"{message} (got {detail})"
        super().__init__(message)


class DuplicateMeasurementError(ConstructionError):
    def __init__(self, name: str):
        super().__init__(f"measurement '{name}' assigned more than once", name)


class NoChoicesError(ConstructionError):
    def __init__(self):
        super().__init__("need at least one choice")


class NoMeasurementsError(ConstructionError):
    def __init__(self):
        super().__init__("need at least one measurement")


class IdentifierCollisionError(ConstructionError):
    def __init__(self, names: Iterable[str]):
        self.names = tuple(names)
        super().__init__(
            f"{', '.join(self.names)} found in both choices and measurements",
            self.names[0] if self.names else None,
        )


class InconsistentMultiverseError(ConstructionError):
    """Index-aligned multiverse sequences of different lengths."""

    def __init__(self, lengths: dict):
        detail = ", ".join(f"{key}={value}" for key, value in lengths.items())
        super().__init__(f"multiverse sequences must have equal length ({detail})")
        self.lengths = dict(lengths)


class ConditionalDeclarationWarning(UserWarning):
    """
    A choice or measurement declared inside a conditional branch or loop.

    Declarations are registered regardless of reachability, so a choice
    under a branch still multiplies the universe count, and a measurement
    under a branch is missing wherever the branch is not taken.
    """


__all__ = [
    "ConstructionError",
    "MalformedChoiceError",
    "DuplicateChoiceError",
    "UnresolvedPossibilitiesError",
    "InsufficientPossibilitiesError",
    "MalformedMeasurementError",
    "DuplicateMeasurementError",
    "NoChoicesError",
    "NoMeasurementsError",
    "IdentifierCollisionError",
    "InconsistentMultiverseError",
    "ConditionalDeclarationWarning",
]
