from enum import Enum
from typing import Union


class DSTType(Enum):
    """Daylight saving time region of an airport, keyed by its one letter code."""

    EUROPE = 'E'
    US_CANADA = 'A'
    SOUTH_AMERICA = 'S'
    AUSTRALIA = 'O'
    NEW_ZEALAND = 'Z'
    NONE = 'N'
    UNKNOWN = 'U'

    @classmethod
    def from_code(cls, code: Union[str, 'DSTType']) -> 'DSTType':
        """
        Map a single character code to its category.

        Raises:
            ValueError: if the code is not a recognised character
        """
        if isinstance(code, cls):
            return code
        if not isinstance(code, str) or len(code.strip()) != 1:
            raise ValueError(f"DST code must be a single character, got {code!r}")
        try:
            return cls(code.strip().upper())
        except ValueError:
            valid = ', '.join(member.value for member in cls)
            raise ValueError(f"Unknown DST code {code!r}, expected one of {valid}") from None

    def to_code(self) -> str:
        return self.value

    def __str__(self) -> str:
        return self.name.replace('_', ' ').title()
