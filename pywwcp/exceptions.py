class WWCPError(Exception):
    """Base class of all errors reported to a pywwcp collaborator."""
    kind = "InternalError"
    client_error = False

    def __init__(self, description: str = ""):
        super().__init__(description)
        self.description = description or self.__class__.__doc__ or self.kind

    def to_json(self) -> dict:
        return {"description": self.description}


class InvalidIdentifier(WWCPError, ValueError):
    """Malformed identifier text."""
    kind = "InvalidIdentifier"
    client_error = True


class InvalidDirectiveInput(WWCPError, ValueError):
    """Malformed expand/include token."""
    kind = "InvalidDirectiveInput"
    client_error = True


class InvalidHistorySize(WWCPError, ValueError):
    """History size must be a positive integer."""
    kind = "InvalidHistorySize"
    client_error = True


class InvalidStatusValue(WWCPError, ValueError):
    """Status token not valid for this entity kind and axis."""
    kind = "InvalidStatusValue"
    client_error = True


class InvalidStatusRequest(WWCPError, ValueError):
    """Malformed status mutation request body."""
    kind = "InvalidStatusRequest"
    client_error = True


class UnknownIdentifier(WWCPError, LookupError):
    """Identifier does not resolve to any entity."""
    kind = "UnknownIdentifier"
    client_error = True


class DuplicateIdentifier(WWCPError, ValueError):
    """Identifier is already registered."""
    kind = "DuplicateIdentifier"
    client_error = True


class OwnershipConflict(WWCPError, ValueError):
    """Child identifier does not belong to the given container."""
    kind = "OwnershipConflict"
    client_error = True


class MutationConflict(WWCPError):
    """Concurrent conflicting append on a status history."""
    kind = "MutationConflict"


class ProjectionError(WWCPError):
    """Unexpected internal fault while building a JSON projection."""
    kind = "InternalError"


class InvalidQueryOptions(WWCPError, ValueError):
    """Malformed skip/take query option."""
    kind = "InvalidQueryOptions"
    client_error = True


class InvalidNetworkData(WWCPError, ValueError):
    """Roaming network description is not a valid nested JSON document."""
    kind = "InvalidNetworkData"
    client_error = True
