"""Domain errors raised by the planner service layer."""


class PlannerError(Exception):
    """Base class for planner errors."""

    default_message = "Erreur du planificateur."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class PlanValidationError(PlannerError):
    default_message = "Donnees de planification invalides."


class IllegalTransition(PlanValidationError):
    default_message = "Transition de statut non autorisee."


class PlanItemNotFound(PlannerError):
    default_message = "Element du plan introuvable."


class TerritoryForbidden(PlannerError):
    default_message = "Action non autorisee sur ce territoire."


class PlanConflict(PlannerError):
    """The (rep, store, week) slot is already taken."""

    default_message = "Ce magasin est deja planifie pour cette semaine."

    def __init__(self, message: str | None = None, conflicting_item_id=None):
        super().__init__(message)
        self.conflicting_item_id = conflicting_item_id
