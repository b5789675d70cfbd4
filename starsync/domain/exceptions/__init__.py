"""
Error message templates.

`EXCEPTION_TEMPLATES` maps exception types to the user-facing title, message
and help text shown by the bot. The exception classes themselves live in
`starsync.modules.shared.exceptions` (domain) and `starsync.core.exceptions`
(infrastructure).
"""

from .registry import EXCEPTION_TEMPLATES, ExceptionTemplate, get_exception_template

__all__ = ["EXCEPTION_TEMPLATES", "ExceptionTemplate", "get_exception_template"]
