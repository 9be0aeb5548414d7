"""
Verification result shared by pe-trailer checks.

Checks report problems into a VerificationResult instead of raising, so a
single pass can list everything wrong with a patched executable.
"""

from dataclasses import dataclass, field


@dataclass
class VerificationResult:
    """Errors and warnings collected by one or more checks.

    Errors fail verification; warnings are reported but leave it passed.
    """

    passed: bool = True
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)
        self.passed = False

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)

    def merge(self, other: "VerificationResult") -> None:
        """Fold another check's findings into this result."""
        self.passed = self.passed and other.passed
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)

    def __str__(self) -> str:
        lines = ["Verification PASSED" if self.passed else "Verification FAILED"]
        for title, items in (("Errors", self.errors), ("Warnings", self.warnings)):
            if items:
                lines.append(f"{title} ({len(items)}):")
                lines.extend(f"  - {item}" for item in items)
        return "\n".join(lines)
