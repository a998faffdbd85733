"""
Storyboard client: an httpx wrapper for the REST API, a serializable
view-model with a pure render function, and the controller tying them
together.
"""

from storyboard.client.api_client import (
    AuthRequiredError,
    ClientRequestError,
    LoginFailedError,
    StoryboardAPI,
)
from storyboard.client.controller import StoryboardController
from storyboard.client.view import Mode, PageView, ViewModel, render, render_html

__all__ = [
    "AuthRequiredError",
    "ClientRequestError",
    "LoginFailedError",
    "Mode",
    "PageView",
    "StoryboardAPI",
    "StoryboardController",
    "ViewModel",
    "render",
    "render_html",
]
