"""
Messaging Automations App for RecruitOps.

Event-triggered messaging automation engine: operators define rules of the
form "when event E happens, render template T with data from the candidate,
job, company, sender, interview and application entities and send it over
channel C".

Features:
- Placeholder extraction and substitution over ``{{identifier}}`` tokens
- Canonical trigger taxonomy with legacy free-text compatibility
- Entity variable catalog for the rule editor
- Guarded preview/test execution that never sends
- Email, SMS and in-app dispatch for real runs

Usage:
    from automations.services import get_engine

    engine = get_engine()
    outcome = engine.run_test(rule, context, operator)
"""
