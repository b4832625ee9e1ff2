"""
Celery tasks for messaging automations.

Event sources that must not block (form handlers, status changes) enqueue
``fire_automations`` or ``fire_status_change_automations`` instead of calling
the engine inline.
"""

import logging
from typing import Any, Dict, Optional

from celery import shared_task
from django.contrib.auth import get_user_model

logger = logging.getLogger(__name__)
User = get_user_model()


def _operator(operator_id: Optional[int]):
    from .services import operator_for

    operator_user = None
    if operator_id:
        operator_user = User.objects.filter(pk=operator_id).first()
        if operator_user is None:
            logger.warning(f"Operator {operator_id} not found; using default sender details")
    return operator_for(operator_user)


def _summary(trigger: str, results) -> Dict[str, Any]:
    sent = sum(1 for result in results if result.success)
    logger.info(f"Automations for {trigger!r}: {sent}/{len(results)} sent")
    return {
        'trigger': trigger,
        'sent': sent,
        'failed': len(results) - sent,
        'results': [result.as_dict() for result in results],
    }


@shared_task(bind=True, queue='automations')
def fire_automations(
    self,
    trigger: str,
    context: Optional[Dict[str, Any]] = None,
    operator_id: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Fire every active automation bound to ``trigger``.

    Args:
        trigger: Canonical trigger id or legacy trigger description
        context: Entity ids (``candidate_id``, ``job_id``, ...) and optional
            ``custom_variables`` describing the event
        operator_id: ID of the user acting as sender when no sender entity
            is part of the context

    Returns:
        Dict with one dispatch result per rule. Failed sends are not retried.
    """
    from .services import get_engine
    from .resolver import TriggerContext

    results = get_engine().fire(trigger, TriggerContext.from_payload(context), _operator(operator_id))
    return _summary(trigger, results)


@shared_task(bind=True, queue='automations')
def fire_status_change_automations(
    self,
    new_status: str,
    context: Optional[Dict[str, Any]] = None,
    previous_status: Optional[str] = None,
    operator_id: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Fire the automations for a candidate moving to ``new_status``.

    Statuses that map to no trigger fire nothing and return an empty summary.
    """
    from .services import get_engine
    from .resolver import TriggerContext

    results = get_engine().fire_status_change(
        TriggerContext.from_payload(context),
        new_status,
        previous_status=previous_status,
        operator=_operator(operator_id),
    )
    return _summary(new_status, results)
