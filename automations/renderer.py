"""
Template rendering for automation messages.

Substitution uses the same ``{{identifier}}`` grammar as the parser. A
placeholder with no variable renders as the empty string, so a preview never
fails on partial data; the unresolved names are reported separately by
``missing_variables``.
"""

from dataclasses import dataclass
from typing import List, Mapping, Optional, Tuple

from .placeholders import PLACEHOLDER_PATTERN, extract_from_pair
from .rules import InlineContent, RuleContent, Template, TemplateRef

# Template mode wraps catalog content in a fixed salutation and signature.
TEMPLATE_SALUTATION = 'Dear {{candidate_name}},\n\n'
TEMPLATE_SIGNATURE = '\n\nBest regards,\n{{sender_name}}\n{{client_name}}'


@dataclass(frozen=True)
class RenderedMessage:
    subject: str
    body: str

    def as_dict(self):
        return {'subject': self.subject, 'body': self.body}


def render_text(template: Optional[str], variables: Mapping[str, str]) -> str:
    """Substitute every placeholder in ``template``; unknown names become ''."""
    if not template:
        return ''
    return PLACEHOLDER_PATTERN.sub(lambda match: variables.get(match.group(1)) or '', template)


def render(subject: Optional[str], body: Optional[str], variables: Mapping[str, str]) -> RenderedMessage:
    return RenderedMessage(
        subject=render_text(subject, variables),
        body=render_text(body, variables),
    )


def missing_variables(subject: Optional[str], body: Optional[str], variables: Mapping[str, str]) -> List[str]:
    """Placeholders used by subject/body that the variable map does not supply."""
    return [name for name in extract_from_pair(subject, body) if name not in variables]


def unescape_newlines(content: Optional[str]) -> str:
    """Turn literal backslash-n sequences from stored templates into newlines."""
    return (content or '').replace('\\n', '\n')


def frame_template_body(content: Optional[str]) -> str:
    return TEMPLATE_SALUTATION + unescape_newlines(content) + TEMPLATE_SIGNATURE


def effective_content(content: RuleContent, template: Optional[Template] = None) -> Tuple[str, str]:
    """
    Return the (subject, body) to render for a rule's content.

    Custom content is used verbatim. Template content takes the template's
    subject and its body wrapped in the salutation/signature frame; the
    caller must pass the template the reference points at.
    """
    if isinstance(content, InlineContent):
        return content.subject, content.body
    if isinstance(content, TemplateRef):
        if template is None:
            raise ValueError(f'Template {content.template_id!r} must be supplied to render template content')
        return template.subject, frame_template_body(template.body)
    raise TypeError(f'Unsupported rule content: {content!r}')
