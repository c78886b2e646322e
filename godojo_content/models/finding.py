"""Findings produced by the quality checker and the validators."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Severity(str, Enum):
    """Blocking findings fail the command, advisory ones are only reported."""

    BLOCKING = "blocking"
    ADVISORY = "advisory"


class Finding(BaseModel):
    """A single rule violation tied to a file."""

    model_config = ConfigDict(frozen=True)

    severity: Severity
    file_path: str
    message: str

    @classmethod
    def blocking(cls, file_path: str, message: str) -> "Finding":
        return cls(severity=Severity.BLOCKING, file_path=file_path, message=message)

    @classmethod
    def advisory(cls, file_path: str, message: str) -> "Finding":
        return cls(severity=Severity.ADVISORY, file_path=file_path, message=message)

    @property
    def is_blocking(self) -> bool:
        return self.severity is Severity.BLOCKING

    def __str__(self) -> str:
        return f"[{self.severity.value}] {self.file_path}: {self.message}"


class Report(BaseModel):
    """Accumulated findings of one run.

    ``with_findings`` returns a new report so a traversal can thread the
    accumulator through each file without shared mutable state.
    """

    model_config = ConfigDict(frozen=True)

    title: str = ""
    checked: int = 0
    findings: tuple[Finding, ...] = Field(default_factory=tuple)
    passed: tuple[str, ...] = Field(default_factory=tuple)

    def with_findings(self, findings: list[Finding], checked: int = 1) -> "Report":
        return self.model_copy(
            update={
                "checked": self.checked + checked,
                "findings": self.findings + tuple(findings),
            }
        )

    def with_passed(self, message: str) -> "Report":
        return self.model_copy(update={"passed": self.passed + (message,)})

    def merge(self, other: "Report") -> "Report":
        return self.model_copy(
            update={
                "checked": self.checked + other.checked,
                "findings": self.findings + other.findings,
                "passed": self.passed + other.passed,
            }
        )

    @property
    def blocking(self) -> list[Finding]:
        return [f for f in self.findings if f.is_blocking]

    @property
    def advisory(self) -> list[Finding]:
        return [f for f in self.findings if not f.is_blocking]

    @property
    def ok(self) -> bool:
        return not self.blocking

    @property
    def exit_code(self) -> int:
        return 0 if self.ok else 1
