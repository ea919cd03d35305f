"""Custom exception hierarchy for clinic-finance."""


class FinanceError(Exception):
    """Base exception for all clinic-finance errors."""


class EntityNotFoundError(FinanceError):
    """Raised when a referenced entity does not exist."""


class ReferentialIntegrityError(EntityNotFoundError):
    """Raised when a foreign key reference is violated."""


class InvalidEntityStateError(FinanceError):
    """Raised when an entity is in an invalid state for the operation."""


class ConfigurationError(FinanceError):
    """Raised when configuration is invalid or missing."""


class SinkError(FinanceError):
    """Raised when a sink operation fails."""


class InvalidAmountError(FinanceError):
    """Raised when a money amount or quantity is not a valid number."""


class InvalidPlanParametersError(InvalidAmountError):
    """Raised when financing plan parameters cannot produce a schedule."""


class InvalidPaymentError(InvalidAmountError):
    """Raised when a payment amount is not acceptable."""


class OverpaymentRejectedError(InvalidPaymentError):
    """Raised when a payment exceeds the installment's remaining balance."""


class InvalidDenominationInputError(InvalidAmountError):
    """Raised when a cash count holds non-numeric or negative quantities."""
