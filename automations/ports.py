"""
Contracts for the engine's external collaborators.

The engine talks to the entity backend, the template catalog, the rule store
and the send transport only through these abstract classes. Concrete
adapters live in ``clients``, ``store`` and ``dispatch``.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, List, Mapping, Optional

from .catalog import EntityKind
from .entities import EntitySnapshot
from .renderer import RenderedMessage
from .rules import AutomationRule, Channel, DraftRule, Template
from .exceptions import DispatchResult


class EntityProvider(ABC):
    """Supplies the selectable entities of one kind."""

    @abstractmethod
    def fetch_entity_list(self, kind: EntityKind) -> List[EntitySnapshot]:
        """Return every entity of ``kind``. Raise ``EntityFetchError`` on failure."""


class TemplateProvider(ABC):
    @abstractmethod
    def fetch_templates(self) -> List[Template]:
        """Return the whole template catalog."""

    def get_template(self, template_id: Any) -> Optional[Template]:
        for template in self.fetch_templates():
            if str(template.id) == str(template_id):
                return template
        return None


class RuleStore(ABC):
    """Persistence for automation rules. Failures propagate unmodified."""

    @abstractmethod
    def load_rules(self) -> List[AutomationRule]:
        pass

    @abstractmethod
    def get_rule(self, rule_id: Any) -> AutomationRule:
        pass

    @abstractmethod
    def create_rule(self, draft: DraftRule, created_by: Any = None) -> AutomationRule:
        pass

    @abstractmethod
    def update_rule(self, rule_id: Any, draft: DraftRule) -> AutomationRule:
        pass

    @abstractmethod
    def delete_rule(self, rule_id: Any) -> None:
        pass

    @abstractmethod
    def toggle_rule(self, rule_id: Any) -> AutomationRule:
        pass

    @abstractmethod
    def record_run(
        self,
        rule_id: Any,
        ran_at: datetime,
        message: Optional[RenderedMessage] = None,
        result: Optional[DispatchResult] = None,
    ) -> AutomationRule:
        """
        Stamp ``last_run_at``, count one more send and keep a record of the
        delivered ``message``. Real dispatch only.
        """

    def active_rules_for(self, trigger) -> List[AutomationRule]:
        return [rule for rule in self.load_rules() if rule.is_active and rule.trigger == trigger]


class Dispatcher(ABC):
    """Performs the actual send of a rendered message."""

    @abstractmethod
    def dispatch(
        self,
        channel: Channel,
        recipient: str,
        message: RenderedMessage,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> DispatchResult:
        pass
