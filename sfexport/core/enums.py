import enum


class StrEnum(str, enum.Enum):
    """Enum whose members compare and format as their string values."""

    __str__ = str.__str__  # type: ignore
