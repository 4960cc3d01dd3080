# Package exports
from formrules.config import Settings, get_settings
from formrules.logging import configure_logging, configure_from_settings, get_logger, validation_context
from formrules.validation import (
    PredicateModule,
    SchemaBuilder,
    Validator,
    ValidationResult,
    rule,
    UnknownPredicateError,
    DuplicateRegistrationError,
    MissingMessageError,
    SchemaDefinitionError,
)

__version__ = "0.1.0"
