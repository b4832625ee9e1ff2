"""
Messaging Automations API ViewSets

Rule lifecycle and preview operations go through ``AutomationEngine`` so the
API applies the same validation, guard and dispatch rules as the Celery
entry points.
"""
from dataclasses import asdict

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..catalog import uncatalogued
from ..models import AutomationRule, MessageTemplate, SentMessage
from ..placeholders import extract_from_pair
from ..resolver import TriggerContext
from ..services import get_engine, operator_for
from ..tasks import fire_automations, fire_status_change_automations
from ..triggers import trigger_for_status
from .serializers import (
    AutomationRuleSerializer,
    AutomationRuleWriteSerializer,
    FireSerializer,
    MessageTemplateSerializer,
    SentMessageSerializer,
    StatusChangeSerializer,
    TemplateTextSerializer,
)


class EngineMixin:
    @property
    def engine(self):
        if not hasattr(self, '_engine'):
            self._engine = get_engine()
        return self._engine


# =============================================================================
# RULE VIEWSETS
# =============================================================================

class AutomationRuleViewSet(EngineMixin, viewsets.ModelViewSet):
    """
    ViewSet for managing automation rules.

    Endpoints:
    - GET /api/v1/automations/rules/ - List rules
    - POST /api/v1/automations/rules/ - Create rule
    - GET /api/v1/automations/rules/<id>/ - Rule detail
    - PUT/PATCH /api/v1/automations/rules/<id>/ - Update rule (status kept unless given)
    - DELETE /api/v1/automations/rules/<id>/ - Delete rule
    - POST /api/v1/automations/rules/<id>/toggle/ - Toggle Active/Inactive
    - POST /api/v1/automations/rules/<id>/preview/ - Render against sample entities
    - POST /api/v1/automations/rules/<id>/test/ - Guarded test run, never sends
    - POST /api/v1/automations/rules/validate/ - Validate a draft
    - POST /api/v1/automations/rules/variables/ - Group a template's placeholders by entity
    - GET /api/v1/automations/rules/triggers/ - Trigger picker
    - GET /api/v1/automations/rules/catalog/ - Variable reference
    - POST /api/v1/automations/rules/fire/ - Fire automations for an event
    - POST /api/v1/automations/rules/status-change/ - Fire automations for a candidate status change
    """
    queryset = AutomationRule.objects.select_related('template', 'created_by').all()
    serializer_class = AutomationRuleSerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ['trigger', 'channel', 'status', 'content_mode']
    search_fields = ['name', 'description']
    ordering_fields = ['created_at', 'name', 'last_run_at', 'sent_count']
    ordering = ['-created_at']

    def get_serializer_class(self):
        if self.action in ('create', 'update', 'partial_update', 'validate'):
            return AutomationRuleWriteSerializer
        return AutomationRuleSerializer

    def _rule_response(self, rule, status_code=status.HTTP_200_OK):
        row = self.get_queryset().get(pk=rule.id)
        return Response(AutomationRuleSerializer(row).data, status=status_code)

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        rule = self.engine.create_rule(serializer.validated_data, created_by=request.user)
        return self._rule_response(rule, status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        rule = self.engine.update_rule(kwargs['pk'], serializer.validated_data)
        return self._rule_response(rule)

    def destroy(self, request, *args, **kwargs):
        self.engine.delete_rule(kwargs['pk'])
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=['post'])
    def toggle(self, request, pk=None):
        """Flip the rule between Active and Inactive."""
        return self._rule_response(self.engine.toggle_rule(pk))

    @action(detail=True, methods=['post'])
    def preview(self, request, pk=None):
        """Render the rule against the selected sample entities."""
        rule = self.engine.get_rule(pk)
        outcome = self.engine.preview(rule, TriggerContext.from_payload(request.data), operator_for(request.user))
        return Response(outcome.as_dict())

    @action(detail=True, methods=['post'], url_path='test', url_name='test')
    def run_test(self, request, pk=None):
        """Guarded test run. Returns 422 when the sample recipient is a placeholder."""
        rule = self.engine.get_rule(pk)
        outcome = self.engine.run_test(rule, TriggerContext.from_payload(request.data), operator_for(request.user))
        if not outcome.success:
            return Response(outcome.as_dict(), status=status.HTTP_422_UNPROCESSABLE_ENTITY)
        return Response(outcome.as_dict())

    @action(detail=False, methods=['post'])
    def validate(self, request):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        errors = self.engine.validate_rule(serializer.validated_data)
        return Response({
            'valid': not errors,
            'errors': [error.as_dict() for error in errors],
        })

    @action(detail=False, methods=['post'])
    def variables(self, request):
        """Which entity data a subject/body pair depends on."""
        serializer = TemplateTextSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        subject = serializer.validated_data['subject']
        body = serializer.validated_data['body']
        names = extract_from_pair(subject, body)
        groups = self.engine.group_variables(subject, body)
        return Response({
            'variables': names,
            'groups': {kind.value: entries for kind, entries in groups.items()},
            'uncatalogued': uncatalogued(names),
        })

    @action(detail=False, methods=['get'])
    def triggers(self, request):
        return Response(self.engine.list_triggers())

    @action(detail=False, methods=['get'])
    def catalog(self, request):
        return Response(self.engine.list_variables())

    @action(detail=False, methods=['post'])
    def fire(self, request):
        """Fire every active rule for a trigger, inline or through Celery."""
        serializer = FireSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        trigger = serializer.validated_data['trigger']
        context = TriggerContext.from_payload(request.data)

        if serializer.validated_data['run_async']:
            task = fire_automations.delay(trigger, context.to_payload(), request.user.pk)
            return Response({'task_id': task.id}, status=status.HTTP_202_ACCEPTED)

        results = self.engine.fire(trigger, context, operator_for(request.user))
        return Response({
            'trigger': trigger,
            'results': [result.as_dict() for result in results],
        })

    @action(detail=False, methods=['post'], url_path='status-change', url_name='status-change')
    def status_change(self, request):
        """Fire the automations a candidate status change maps to, if any."""
        serializer = StatusChangeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        new_status = serializer.validated_data['new_status']
        previous_status = serializer.validated_data['previous_status']
        context = TriggerContext.from_payload(request.data)

        if serializer.validated_data['run_async']:
            task = fire_status_change_automations.delay(
                new_status, context.to_payload(), previous_status, request.user.pk,
            )
            return Response({'task_id': task.id}, status=status.HTTP_202_ACCEPTED)

        trigger = trigger_for_status(new_status)
        results = self.engine.fire_status_change(
            context, new_status, previous_status=previous_status, operator=operator_for(request.user),
        )
        return Response({
            'trigger': trigger.value if trigger else None,
            'results': [result.as_dict() for result in results],
        })


# =============================================================================
# TEMPLATE & ENTITY VIEWSETS
# =============================================================================

class MessageTemplateViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Read-only template catalog.

    Endpoints:
    - GET /api/v1/automations/templates/ - List templates
    - GET /api/v1/automations/templates/<id>/ - Template detail
    """
    queryset = MessageTemplate.objects.all()
    serializer_class = MessageTemplateSerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ['category']
    search_fields = ['name', 'subject', 'description']
    ordering = ['name']


class EntityListViewSet(EngineMixin, viewsets.ViewSet):
    """
    Selectable sample data for the test panel.

    Endpoints:
    - GET /api/v1/automations/entities/ - All six entity lists, fetched concurrently
    """
    permission_classes = [IsAuthenticated]

    def list(self, request):
        entities = self.engine.load_entities()
        return Response({
            'entities': {
                kind.value: [asdict(snapshot) for snapshot in snapshots]
                for kind, snapshots in entities.lists.items()
            },
            'errors': {kind.value: error.message for kind, error in entities.errors.items()},
        })


class SentMessageViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Delivery history of real automation runs.

    Endpoints:
    - GET /api/v1/automations/sent-messages/ - List sent messages (filter by rule, channel, trigger)
    - GET /api/v1/automations/sent-messages/<id>/ - Sent message detail
    """
    queryset = SentMessage.objects.select_related('rule').all()
    serializer_class = SentMessageSerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ['rule', 'channel', 'trigger']
    search_fields = ['recipient', 'subject']
    ordering = ['-sent_at']
