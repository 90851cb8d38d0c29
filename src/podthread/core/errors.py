"""Fatal conversion errors"""


class ConversionError(RuntimeError):
    """Base class for conditions that make a conversion fail."""


class PodSyntaxError(ConversionError):
    """The source had POD errors; raised once the rest of the output is written."""

    def __init__(self, errata: list[str]):
        self.errata = list(errata)
        count = len(self.errata)
        super().__init__(f"{count} POD error{'s' if count != 1 else ''} in document")


class OutputWriteError(ConversionError):
    """Writing to the destination failed."""
