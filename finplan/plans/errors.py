"""Exceptions raised by the scenario engine."""


class ScenarioError(Exception):
    """Base exception for plan operations."""
    pass


class InvalidInputError(ScenarioError):
    """
    The caller broke the call contract (e.g. passed None instead of a list).

    The orchestration layer validates shapes before calling the engine, so
    this signals a programming error rather than an expected runtime path.
    """
    pass


class PlanCreationError(InvalidInputError):
    """A plan could not be created from the given inputs."""
    pass


class PlanNotFoundError(ScenarioError):
    """No plan exists with the requested id."""

    def __init__(self, plan_id):
        self.plan_id = plan_id
        super().__init__(f"Plan not found: {plan_id}")


class RecordNotFoundError(ScenarioError):
    """The plan has no snapshot entry with the requested id."""

    def __init__(self, plan_id, kind, record_id):
        self.plan_id = plan_id
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"Plan {plan_id} has no {kind} with id {record_id!r}")
