"""
errors.py

Error taxonomy for the plan pipeline.

  GenerationFailure   upstream call errored, timed out or returned nothing
  MalformedResponse   payload is not JSON once code fences are stripped
  SchemaViolation     JSON parsed but does not match the domain schema
  PersistenceFailure  transaction / store error
  NotFound            referenced user or profile is absent
  Forbidden           operation needs an active subscription
  RateLimited         per-user generation budget exhausted

The first three never leave the pipeline boundary as-is: callers see a
single GenerationUnavailable instead.
"""

from __future__ import annotations

from dataclasses import dataclass


class PlanError(Exception):
    """Root of every error raised by this project."""


class GenerationFailure(PlanError):
    pass


class UpstreamTimeout(GenerationFailure):
    pass


class MalformedResponse(PlanError):
    pass


@dataclass(frozen=True)
class SchemaIssue:
    path:     str
    expected: str
    got:      str

    def __str__(self) -> str:
        return f"{self.path}: expected {self.expected}, got {self.got}"


class SchemaViolation(PlanError):

    def __init__(self, issues: list[SchemaIssue]):
        self.issues = list(issues)
        first = self.issues[0] if self.issues else "unknown schema error"
        more  = f" (+{len(self.issues) - 1} more)" if len(self.issues) > 1 else ""
        super().__init__(f"{first}{more}")


class PersistenceFailure(PlanError):
    pass


class NotFound(PlanError):
    pass


class Forbidden(PlanError):
    pass


class RateLimited(PlanError):
    pass


class GenerationUnavailable(PlanError):
    """Generic failure surfaced to callers; the cause is logged, not exposed."""

    def __init__(self, domain: str):
        self.domain = domain
        super().__init__(f"Unable to generate {domain} plan at this time")


# Errors that mean "the model did not give us a usable plan".
GENERATION_ERRORS = (GenerationFailure, MalformedResponse, SchemaViolation)
