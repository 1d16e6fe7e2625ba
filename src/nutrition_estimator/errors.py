"""Application error types."""


class NutritionEstimatorError(Exception):
    """Base error for the nutrition estimator."""


class ConfigurationError(NutritionEstimatorError):
    """Raised when a required external service credential is missing."""
