"""
Erreurs métier du noyau présences / suspensions / facturation.

Chaque famille correspond à un code HTTP (voir academy.main) :
NotFound → 404, Conflict → 409, InvalidInput → 400, NotAuthorized → 403.
UpstreamDegraded n'est jamais propagée : elle est collectée dans les rapports d'envoi.
"""


class DomainError(ValueError):
    """Base des erreurs métier. Hérite de ValueError comme les services existants."""

    kind = "domain_error"


class NotFound(DomainError):
    kind = "not_found"


class Conflict(DomainError):
    kind = "conflict"


class InvalidInput(DomainError):
    kind = "invalid_input"


class NotAuthorized(DomainError):
    kind = "not_authorized"


class UpstreamDegraded(DomainError):
    """Échec d'un collaborateur externe (envoi WhatsApp). Toujours non bloquant."""

    kind = "upstream_degraded"


# --- NotFound ---

class StudentNotFound(NotFound):
    pass


class GroupNotFound(NotFound):
    pass


class NoSuspensionsFound(NotFound):
    pass


# --- Conflict ---

class DuplicateAttendance(Conflict):
    pass


class DuplicatePayment(Conflict):
    pass


class DuplicateCardCode(Conflict):
    pass


class DuplicateGroupCode(Conflict):
    pass


class GroupHasStudents(Conflict):
    pass


# --- InvalidInput ---

class InvalidSuspensionKind(InvalidInput):
    pass


class MissingEndDate(InvalidInput):
    pass


class InvalidSuspensionPeriod(InvalidInput):
    pass


class InvalidSchedule(InvalidInput):
    pass


class InvalidPaymentMethod(InvalidInput):
    pass


class MissingBillingMonth(InvalidInput):
    pass
