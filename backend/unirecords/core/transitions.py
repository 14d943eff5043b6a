"""
Status-transition allow-lists.

A table maps each status to the set of statuses it may move to. Services call
``ensure`` before touching the entity, so a rejected transition never leaves
a half-applied mutation behind.
"""
from enum import Enum
from typing import Dict, FrozenSet, Iterable, Mapping, Type

from unirecords.core.exceptions import InvalidStatusTransitionError


def _value(status) -> str:
    return status.value if isinstance(status, Enum) else str(status)


class StatusTransitionTable:
    """Allowed current -> next pairs for one entity's status field"""

    def __init__(self, entity: str, status_enum: Type[Enum], transitions: Mapping[Enum, Iterable[Enum]]):
        self.entity = entity
        self.status_enum = status_enum
        self._transitions: Dict[Enum, FrozenSet[Enum]] = {
            status: frozenset(transitions.get(status, ())) for status in status_enum
        }

    def successors(self, current) -> FrozenSet[Enum]:
        return self._transitions[self.status_enum(current)]

    def can_transition(self, current, target) -> bool:
        return self.status_enum(target) in self.successors(current)

    def ensure(self, current, target) -> None:
        """Raise InvalidStatusTransitionError unless current -> target is allowed"""
        if not self.can_transition(current, target):
            raise InvalidStatusTransitionError(
                self.entity,
                _value(current),
                _value(target),
                allowed=[s.value for s in self.successors(current)],
            )

    def is_terminal(self, status) -> bool:
        return not self.successors(status)

    def __repr__(self):
        return f"<StatusTransitionTable {self.entity}>"
