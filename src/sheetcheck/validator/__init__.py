from sheetcheck.validator.validator import Validator, validate_dataset

__all__ = ["Validator", "validate_dataset"]
