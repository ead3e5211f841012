"""Page objects for the applications under test."""

from .google import GoogleSearchPage
from .saucedemo import SauceDemoPage

__all__ = [
    "GoogleSearchPage",
    "SauceDemoPage",
]
