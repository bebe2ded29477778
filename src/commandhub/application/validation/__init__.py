from .parameter_validator import validate_parameters, check_type

__all__ = ["validate_parameters", "check_type"]
