"""Shell quoting shared by every rendered command.

All values that come from configuration pass through ``shell_quote`` (or
``quote_word`` for bare arguments), so escaping happens in exactly one
place when a stage is serialized.
"""

import re
import shlex

_DOUBLE_QUOTE_SPECIALS = re.compile(r'([\\"$`])')


def shell_quote(value: str, quote: str = "'") -> str:
    """Always quote ``value`` using the given quote character.

    Example:
        >>> shell_quote("shop.orders")
        "'shop.orders'"
        >>> shell_quote("/var/lib/my dir", quote='"')
        '"/var/lib/my dir"'
    """
    if quote == "'":
        return "'" + value.replace("'", "'\"'\"'") + "'"
    if quote == '"':
        return '"' + _DOUBLE_QUOTE_SPECIALS.sub(r"\\\1", value) + '"'
    raise ValueError(f"Unsupported quote character: {quote!r}")


def quote_word(value: str) -> str:
    """Quote ``value`` only when it contains shell metacharacters."""
    return shlex.quote(value)
