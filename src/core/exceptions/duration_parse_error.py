class DurationParseError(ValueError):
    def __init__(self, text: str, reason: str):
        self.text = text
        self.reason = reason
        super().__init__(f"Invalid duration '{text}': {reason}")


class InvalidFormatError(DurationParseError):
    def __init__(self, text: str):
        super().__init__(text, "expected <digits><unit> with unit one of h, min, s, ms")


class InvalidMagnitudeError(DurationParseError):
    def __init__(self, text: str):
        super().__init__(text, "duration must be greater than 0")


class UnknownUnitError(DurationParseError):
    def __init__(self, text: str):
        super().__init__(text, "unknown time unit")
