class ImbStreamError(Exception):
    pass

class ConfigError(ImbStreamError):
    pass

class InvalidInputError(ImbStreamError):
    pass

class SchemaError(InvalidInputError):
    pass

class UnsupportedModeError(ImbStreamError):
    pass

class NumericDomainError(ImbStreamError, ArithmeticError):
    pass

class OversamplingLimitError(ImbStreamError):
    pass
