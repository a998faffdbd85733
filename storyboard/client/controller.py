"""
Storyboard Client — View/Edit Controller
=========================================

What:  Drives the storyboard UI: loading parts, switching between view and
       edit mode, the login prompt, the create/edit form, image upload,
       deletion and up/down reordering.
How:   The controller owns one ViewModel. Every method computes a new
       ViewModel (pydantic `model_copy`), stores it, and returns it; callers
       render it with `storyboard.client.view.render`.

Modes:
    view   read-only; ArrowDown/PageDown and ArrowUp/PageUp scroll a screen
    edit   per-part move up/down, edit, delete, plus an add button

Session expiry:
    Every write (create, update, delete, reorder, upload) that gets
    AuthRequiredError goes through `handle_auth_error`, the single recovery
    path: drop auth and edit mode, close the form, say the session expired,
    reopen the login prompt.
"""

import logging
from typing import Optional

import httpx

from storyboard.client.api_client import (
    AuthRequiredError,
    ClientRequestError,
    LoginFailedError,
    StoryboardAPI,
)
from storyboard.client.view import (
    EDIT_PART_HEADING,
    MESSAGES,
    LoginPrompt,
    Mode,
    PageView,
    PartForm,
    ViewModel,
    render,
)

logger = logging.getLogger(__name__)

MAX_IMAGE_SIZE = 10 * 1024 * 1024

SCROLL_DOWN_KEYS = {"ArrowDown", "PageDown"}
SCROLL_UP_KEYS = {"ArrowUp", "PageUp"}

_REQUEST_ERRORS = (ClientRequestError, httpx.HTTPError)


class StoryboardController:

    def __init__(self, api: StoryboardAPI, view_model: Optional[ViewModel] = None):
        self.api = api
        self.view_model = view_model or ViewModel()

    def _set(self, **changes) -> ViewModel:
        self.view_model = self.view_model.model_copy(update=changes)
        return self.view_model

    def render(self) -> PageView:
        return render(self.view_model)

    # ── Loading ───────────────────────────────────────────────────────────

    async def init(self) -> ViewModel:
        """Fetch the auth status, then the parts. A failed status check counts as logged out."""
        try:
            status = await self.api.check_auth()
        except _REQUEST_ERRORS as e:
            logger.warning("Auth status check failed: %s", e)
            status = {"authenticated": False}

        self._set(
            authenticated=bool(status.get("authenticated")),
            username=status.get("username"),
        )
        return await self.load_parts()

    async def load_parts(self) -> ViewModel:
        try:
            parts = await self.api.get_parts()
        except _REQUEST_ERRORS as e:
            logger.error("Error loading parts: %s", e)
            return self._set(message=MESSAGES["load_failed"])
        return self._set(parts=parts)

    # ── Modes and login ───────────────────────────────────────────────────

    def toggle_edit_mode(self) -> ViewModel:
        """Enter or leave edit mode. Entering without auth opens the login prompt instead."""
        vm = self.view_model
        if vm.mode == Mode.VIEW and not vm.authenticated:
            return self.open_login(enter_edit_mode=True)
        if vm.mode == Mode.EDIT:
            return self._set(mode=Mode.VIEW, form=None)
        return self._set(mode=Mode.EDIT)

    def open_login(self, enter_edit_mode: bool = False) -> ViewModel:
        return self._set(login=LoginPrompt(open=True, enter_edit_mode=enter_edit_mode))

    def close_login(self) -> ViewModel:
        return self._set(login=LoginPrompt())

    async def login(self, username: str, password: str) -> ViewModel:
        """
        Log in from the prompt. When the prompt was opened on the way into
        edit mode, a successful login completes that transition.
        """
        try:
            await self.api.login(username, password)
        except LoginFailedError as e:
            key = "invalid_credentials" if e.invalid else "login_failed"
            return self._set(login=self.view_model.login.model_copy(update={"error": MESSAGES[key]}))
        except _REQUEST_ERRORS as e:
            logger.error("Login error: %s", e)
            return self._set(
                login=self.view_model.login.model_copy(update={"error": MESSAGES["login_failed"]})
            )

        enter_edit = self.view_model.login.enter_edit_mode
        self._set(authenticated=True, username=username, login=LoginPrompt(), message=None)
        if enter_edit and self.view_model.mode == Mode.VIEW:
            return self.toggle_edit_mode()
        return self.view_model

    async def logout(self) -> ViewModel:
        try:
            await self.api.logout()
        except _REQUEST_ERRORS as e:
            logger.error("Logout error: %s", e)
            return self._set(message=MESSAGES["logout_failed"])
        return self._set(
            authenticated=False,
            username=None,
            mode=Mode.VIEW,
            form=None,
            message=MESSAGES["logged_out"],
        )

    def handle_auth_error(self) -> ViewModel:
        """Single recovery path for a write rejected with 401."""
        return self._set(
            authenticated=False,
            username=None,
            mode=Mode.VIEW,
            form=None,
            message=MESSAGES["session_expired"],
            login=LoginPrompt(open=True, enter_edit_mode=True),
        )

    # ── Form ──────────────────────────────────────────────────────────────

    def open_create(self) -> ViewModel:
        """Open an empty form; enters edit mode first (possibly via the login prompt)."""
        if self.view_model.mode != Mode.EDIT:
            self.toggle_edit_mode()
            if self.view_model.mode != Mode.EDIT:
                return self.view_model
        return self._set(form=PartForm())

    def open_edit(self, part_id: int) -> ViewModel:
        part = next((p for p in self.view_model.parts if p.id == part_id), None)
        if part is None:
            return self.view_model
        return self._set(
            form=PartForm(
                part_id=part.id,
                heading=EDIT_PART_HEADING,
                title=part.title,
                image_path=part.image_path or "",
                movement_description=part.movement_description or "",
                content=part.content,
            )
        )

    def edit_form(self, **fields) -> ViewModel:
        """Change form fields (title, movement_description, content)."""
        if self.view_model.form is None:
            return self.view_model
        return self._set(form=self.view_model.form.model_copy(update=fields))

    def close_form(self) -> ViewModel:
        return self._set(form=None)

    async def upload_image(self, filename: str, content: bytes, content_type: str) -> ViewModel:
        """
        Upload an image for the open form and keep its returned path.
        Non-images and files over 10 MB are refused before any request.
        """
        if self.view_model.form is None:
            return self.view_model
        if not content_type.startswith("image/"):
            return self._set(message=MESSAGES["not_an_image"])
        if len(content) > MAX_IMAGE_SIZE:
            return self._set(message=MESSAGES["file_too_large"])

        try:
            path = await self.api.upload_image(filename, content, content_type)
        except AuthRequiredError:
            return self.handle_auth_error()
        except _REQUEST_ERRORS as e:
            logger.error("Error uploading image: %s", e)
            return self._set(message=MESSAGES["upload_failed"])
        return self.edit_form(image_path=path)

    def remove_image(self) -> ViewModel:
        return self.edit_form(image_path="")

    async def submit_form(self) -> ViewModel:
        """Create or update from the form, then reload and close it."""
        form = self.view_model.form
        if form is None:
            return self.view_model

        try:
            if form.part_id is not None:
                await self.api.update_part(form.part_id, form.to_payload())
            else:
                await self.api.create_part(form.to_payload())
        except AuthRequiredError:
            return self.handle_auth_error()
        except _REQUEST_ERRORS as e:
            logger.error("Error saving part: %s", e)
            return self._set(message=MESSAGES["save_failed"])

        await self.load_parts()
        return self.close_form()

    # ── List operations ───────────────────────────────────────────────────

    async def delete_part(self, part_id: int) -> ViewModel:
        if not any(p.id == part_id for p in self.view_model.parts):
            return self.view_model

        try:
            await self.api.delete_part(part_id)
        except AuthRequiredError:
            return self.handle_auth_error()
        except _REQUEST_ERRORS as e:
            logger.error("Error deleting part: %s", e)
            return self._set(message=MESSAGES["delete_failed"])

        return await self.load_parts()

    async def move_part(self, part_id: int, direction: int) -> ViewModel:
        """
        Swap a part with its neighbour (direction -1 = up, +1 = down), submit
        a dense 1..N order for the whole list, reload, and scroll to it.
        Moving past either end does nothing.
        """
        parts = list(self.view_model.parts)
        current = next((i for i, p in enumerate(parts) if p.id == part_id), None)
        if current is None:
            return self.view_model

        target = current + direction
        if target < 0 or target >= len(parts):
            return self.view_model

        parts[current], parts[target] = parts[target], parts[current]
        batch = [{"id": p.id, "order_index": index + 1} for index, p in enumerate(parts)]

        try:
            await self.api.reorder_parts(batch)
        except AuthRequiredError:
            return self.handle_auth_error()
        except _REQUEST_ERRORS as e:
            logger.error("Error reordering parts: %s", e)
            return self._set(message=MESSAGES["reorder_failed"])

        await self.load_parts()
        return self._set(scroll_target=part_id)

    # ── Keyboard ──────────────────────────────────────────────────────────

    def handle_key(self, key: str) -> int:
        """
        Returns the number of screens to scroll (+1 down, -1 up, 0 none).
        Escape closes the open modal (the part form first, then the login prompt).
        """
        if key == "Escape":
            if self.view_model.form is not None:
                self.close_form()
            elif self.view_model.login.open:
                self.close_login()
            return 0

        if self.view_model.mode != Mode.VIEW or self.view_model.modal_open:
            return 0
        if key in SCROLL_DOWN_KEYS:
            return 1
        if key in SCROLL_UP_KEYS:
            return -1
        return 0
