"""
Django Admin configuration for the automations app.
"""

from django.contrib import admin

from .models import AutomationRule, MessageTemplate, SentMessage
from .triggers import display_name


@admin.register(MessageTemplate)
class MessageTemplateAdmin(admin.ModelAdmin):
    list_display = ['name', 'category', 'subject', 'rule_count', 'updated_at']
    list_filter = ['category']
    search_fields = ['name', 'subject', 'description']
    readonly_fields = ['created_at', 'updated_at']

    def rule_count(self, obj):
        return obj.automation_rules.count()
    rule_count.short_description = 'Rules'


@admin.register(AutomationRule)
class AutomationRuleAdmin(admin.ModelAdmin):
    """Admin for AutomationRule model."""
    list_display = [
        'name', 'trigger_label', 'channel', 'content_mode',
        'status', 'sent_count', 'last_run_at',
    ]
    list_filter = ['trigger', 'channel', 'status', 'content_mode']
    search_fields = ['name', 'description']
    readonly_fields = ['last_run_at', 'sent_count', 'created_by', 'created_at', 'updated_at']
    raw_id_fields = ['template']
    actions = ['activate_rules', 'deactivate_rules']

    fieldsets = (
        ('Rule', {
            'fields': ('name', 'description', 'trigger', 'channel', 'status')
        }),
        ('Content', {
            'fields': ('content_mode', 'template', 'subject', 'body')
        }),
        ('Activity', {
            'fields': ('last_run_at', 'sent_count', 'created_by', 'created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def trigger_label(self, obj):
        return display_name(obj.trigger)
    trigger_label.short_description = 'Trigger'

    @admin.action(description='Activate selected rules')
    def activate_rules(self, request, queryset):
        updated = queryset.update(status='active')
        self.message_user(request, f'{updated} rule(s) activated.')

    @admin.action(description='Deactivate selected rules')
    def deactivate_rules(self, request, queryset):
        updated = queryset.update(status='inactive')
        self.message_user(request, f'{updated} rule(s) deactivated.')


@admin.register(SentMessage)
class SentMessageAdmin(admin.ModelAdmin):
    """Read-only delivery history."""
    list_display = ['sent_at', 'rule', 'channel', 'recipient', 'subject']
    list_filter = ['channel', 'trigger', 'sent_at']
    search_fields = ['recipient', 'subject', 'rule__name']
    date_hierarchy = 'sent_at'
    readonly_fields = [
        'rule', 'template', 'trigger', 'channel', 'recipient',
        'subject', 'body', 'external_id', 'sent_at',
    ]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
