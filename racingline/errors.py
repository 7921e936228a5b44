"""
Error taxonomy for the racing line simulation
"""


class RacingLineError(Exception):
    """Base class for all racing line errors"""


class InvalidParameterError(RacingLineError, ValueError):
    """A tunable parameter is outside its allowed range"""


class FisFormatError(RacingLineError):
    """An engine configuration source could not be parsed"""


class EngineLoadError(RacingLineError):
    """An engine configuration source is missing or malformed"""


class EngineNotReadyError(RacingLineError):
    """An engine was asked to process while not ready"""


class ControllerOutputFault(RacingLineError):
    """An engine produced a malformed (not-a-number) output"""

    def __init__(self, engine_name: str, value: float) -> None:
        super().__init__(f"Engine '{engine_name}' produced a malformed output: {value!r}")
        self.engine_name = engine_name
        self.value = value
