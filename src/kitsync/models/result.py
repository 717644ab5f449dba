"""Result contract shared by every top-level operation."""

import logging
from dataclasses import dataclass, field


@dataclass(frozen=True)
class OperationResult:
    """Outcome of one top-level operation.

    Warnings never make an operation unsuccessful; only errors do.
    """

    operation: str
    success: bool
    warnings: tuple[str, ...] = ()
    errors: tuple[str, ...] = ()


@dataclass
class Report:
    """Collects warnings and errors while an operation runs.

    Every message is also sent to the given logger so library callers get
    the same diagnostics as CLI users.
    """

    operation: str
    logger: logging.Logger
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def warn(self, message: str) -> None:
        self.logger.warning(message)
        self.warnings.append(message)

    def error(self, message: str) -> None:
        self.logger.error(message)
        self.errors.append(message)

    def to_result(self) -> OperationResult:
        return OperationResult(
            operation=self.operation,
            success=not self.errors,
            warnings=tuple(self.warnings),
            errors=tuple(self.errors),
        )
