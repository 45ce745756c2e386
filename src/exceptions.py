class ResourceNotFoundException(Exception):
    pass


class PayloadValidationError(Exception):
    def __init__(self, errors):
        super().__init__("Validation failed")
        self.errors = errors


class StockValidationError(Exception):
    """Raised when one or more cart lines cannot be fulfilled."""

    def __init__(self, errors):
        super().__init__("Stock validation failed")
        self.errors = list(errors)


class ImportFileError(Exception):
    pass
