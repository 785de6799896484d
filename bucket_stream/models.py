"""
Data models shared by the stream implementations.
"""


from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, model_validator


class Outcome(BaseModel):
    """
    The result of pulling one item from a stream, for cases where errors
    should be reported alongside values instead of ending the stream.

    Attributes:
        value: The value that was produced, if there was no error.
        error: The exception that was raised, if there was one.

    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    value: Any = None
    error: Optional[BaseException] = None

    @model_validator(mode="after")
    def check_not_both(self) -> "Outcome":
        if self.error is not None and self.value is not None:
            raise ValueError("Outcome cannot have both a value and an error.")
        return self

    @property
    def ok(self) -> bool:
        """
        Returns:
            True iff this outcome is a value and not an error.

        """
        return self.error is None

    def unwrap(self) -> Any:
        """
        Returns:
            The value of this outcome.

        Raises:
            The stored error, if this outcome is an error.

        """
        if self.error is not None:
            raise self.error
        return self.value
