"""Selector notation for element lookup.

Steps refer to elements with short prefixed strings instead of raw CSS:

    id:login-button   -> #login-button
    name:q            -> [name="q"]
    input:username    -> input[name="username"], then input#username
    css:.item         -> .item
    button            -> button (no prefix means CSS)

A prefix maps to an ordered list of candidate templates. The first
candidate is the primary selector; later ones are fallbacks the waiter
tries when the primary never shows up.
"""

from dataclasses import dataclass, field
from typing import Mapping, Union

CSS_PREFIX = "css"
VALUE_PLACEHOLDER = "{value}"

DEFAULT_RULES: dict[str, tuple[str, ...]] = {
    "id": ("#{value}",),
    "name": ('[name="{value}"]',),
    "css": ("{value}",),
    # Form inputs are authored with either a name or an id attribute
    "input": ('input[name="{value}"]', "input#{value}"),
}


@dataclass(frozen=True)
class Selector:
    """A parsed selector: prefix plus the raw value after the first ':'."""
    prefix: str
    raw_value: str

    def __str__(self) -> str:
        if self.prefix == CSS_PREFIX:
            return self.raw_value
        return f"{self.prefix}:{self.raw_value}"


@dataclass(frozen=True)
class ResolutionStrategy:
    """Ordered candidate templates per selector prefix."""
    rules: Mapping[str, tuple[str, ...]] = field(default_factory=lambda: dict(DEFAULT_RULES))

    def parse(self, selector: Union[str, Selector]) -> Selector:
        """Split a selector string at its first ':'.

        Only registered prefixes are honoured. Anything else, including CSS
        pseudo-classes such as 'a:hover', is kept whole as implicit CSS.
        """
        if isinstance(selector, Selector):
            return selector
        prefix, sep, raw_value = selector.partition(":")
        if sep and prefix in self.rules:
            return Selector(prefix=prefix, raw_value=raw_value)
        return Selector(prefix=CSS_PREFIX, raw_value=selector)

    def candidates(self, selector: Union[str, Selector]) -> list[str]:
        """Concrete selectors to try, primary first."""
        parsed = self.parse(selector)
        templates = self.rules.get(parsed.prefix) or (VALUE_PLACEHOLDER,)
        return [template.replace(VALUE_PLACEHOLDER, parsed.raw_value) for template in templates]

    def resolve(self, selector: Union[str, Selector]) -> str:
        """Primary concrete selector."""
        return self.candidates(selector)[0]

    def with_rule(self, prefix: str, *templates: str) -> "ResolutionStrategy":
        """Return a copy with `prefix` mapped to `templates`."""
        if not templates:
            raise ValueError("At least one template is required")
        rules = dict(self.rules)
        rules[prefix] = tuple(templates)
        return ResolutionStrategy(rules=rules)


DEFAULT_STRATEGY = ResolutionStrategy()


def parse_selector(selector: Union[str, Selector]) -> Selector:
    """Parse with the default prefixes."""
    return DEFAULT_STRATEGY.parse(selector)


def resolve(selector: Union[str, Selector]) -> str:
    """Resolve to the primary CSS selector.

    Never raises. An invalid selector only shows up later as a wait timeout.
    """
    return DEFAULT_STRATEGY.resolve(selector)
