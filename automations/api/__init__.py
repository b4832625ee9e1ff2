"""
Messaging Automations REST API.
"""
