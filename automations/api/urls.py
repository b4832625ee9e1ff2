"""
Messaging Automations API URLs
"""
from rest_framework.routers import DefaultRouter

from .viewsets import (
    AutomationRuleViewSet,
    EntityListViewSet,
    MessageTemplateViewSet,
    SentMessageViewSet,
)

app_name = 'automations-api'

router = DefaultRouter()
router.register(r'rules', AutomationRuleViewSet, basename='rule')
router.register(r'templates', MessageTemplateViewSet, basename='template')
router.register(r'entities', EntityListViewSet, basename='entities')
router.register(r'sent-messages', SentMessageViewSet, basename='sent-message')

urlpatterns = router.urls
