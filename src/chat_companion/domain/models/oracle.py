"""Outcome of a generative model call."""

from typing import Annotated, Literal

from pydantic import BaseModel, Field


class OracleSuccess(BaseModel):
    kind: Literal["success"] = "success"
    text: str

    @property
    def ok(self) -> bool:
        return True


class OracleFailure(BaseModel):
    kind: Literal["failure"] = "failure"
    reason: str
    error_type: str = Field(default="error", description="error, timeout, blocked or circuit_open")

    @property
    def ok(self) -> bool:
        return False


OracleResult = Annotated[OracleSuccess | OracleFailure, Field(discriminator="kind")]


def text_or_empty(result: OracleSuccess | OracleFailure) -> str:
    """Stripped model text, or an empty string for failures.

    A model asked to "return an empty string" sometimes answers with a
    literal pair of quotes; that is treated as empty too.
    """
    if not isinstance(result, OracleSuccess):
        return ""
    text = result.text.strip()
    if text in ('""', "''"):
        return ""
    return text
