"""
Storyboard Client — View-Model and Declarative Rendering
=========================================================

What:  The client's whole UI state as one serializable pydantic model, plus a
       pure `render()` mapping that state to a view description.
How:   StoryboardController owns a ViewModel and replaces it on every
       change. `render(view_model)` never touches I/O and can be called any
       number of times with the same result; `render_html(page)` turns the
       view description into HTML through the autoescaping Jinja2 template
       storyboard/templates/index.html (used by GET /).

    ViewModel ──render()──▶ PageView ──render_html()──▶ str
"""

from enum import Enum
from pathlib import Path
from typing import List, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape
from pydantic import BaseModel, Field

from storyboard.schemas.part import PartResponse

# User-facing strings, keyed by situation
MESSAGES = {
    "session_expired": "Your session has expired. Please log in again.",
    "load_failed": "Failed to load parts. Please refresh the page.",
    "save_failed": "Failed to save the part. Please try again.",
    "delete_failed": "Failed to delete the part. Please try again.",
    "reorder_failed": "Failed to reorder parts. Please try again.",
    "upload_failed": "Failed to upload the image. Please try again.",
    "not_an_image": "Please upload an image file only.",
    "file_too_large": "The file is too large. The maximum size is 10 MB.",
    "invalid_credentials": "Incorrect username or password.",
    "login_failed": "Login failed.",
    "logout_failed": "Logout failed.",
    "logged_out": "Logged out successfully.",
}

ADD_PART_HEADING = "Add new part"
EDIT_PART_HEADING = "Edit part"


class Mode(str, Enum):
    VIEW = "view"
    EDIT = "edit"


class PartForm(BaseModel):
    """State of the create/edit modal. part_id is None when creating."""
    part_id: Optional[int] = None
    heading: str = ADD_PART_HEADING
    title: str = ""
    image_path: str = ""
    movement_description: str = ""
    content: str = ""

    def to_payload(self) -> dict:
        return {
            "title": self.title.strip(),
            "image_path": self.image_path,
            "movement_description": self.movement_description.strip(),
            "content": self.content.strip(),
        }


class LoginPrompt(BaseModel):
    open: bool = False
    error: Optional[str] = None
    # Finish entering edit mode once the login succeeds
    enter_edit_mode: bool = False


class ViewModel(BaseModel):
    """
    Everything the client knows. `parts` is a read replica of the store,
    replaced wholesale after every mutation.
    """
    parts: List[PartResponse] = Field(default_factory=list)
    mode: Mode = Mode.VIEW
    authenticated: bool = False
    username: Optional[str] = None
    form: Optional[PartForm] = None
    login: LoginPrompt = Field(default_factory=LoginPrompt)
    message: Optional[str] = None
    scroll_target: Optional[int] = None

    @property
    def modal_open(self) -> bool:
        return self.form is not None or self.login.open


# ══════════════════════════════════════════════════════════════════════════
# View description
# ══════════════════════════════════════════════════════════════════════════


class PartControls(BaseModel):
    can_move_up: bool
    can_move_down: bool
    can_edit: bool = True
    can_delete: bool = True


class SectionView(BaseModel):
    part_id: int
    title: str
    image_path: Optional[str] = None
    movement_description: Optional[str] = None
    content: str
    controls: Optional[PartControls] = None


class PageView(BaseModel):
    mode: Mode
    sections: List[SectionView]
    show_empty_state: bool
    show_add_button: bool
    show_logout_button: bool
    mode_toggle_label: str
    form: Optional[PartForm] = None
    login_open: bool = False
    login_error: Optional[str] = None
    message: Optional[str] = None
    scroll_target: Optional[int] = None


def render(view_model: ViewModel) -> PageView:
    """Map (parts, mode, auth, modals) to a PageView."""
    editing = view_model.mode == Mode.EDIT
    last = len(view_model.parts) - 1

    sections = [
        SectionView(
            part_id=part.id,
            title=part.title,
            image_path=part.image_path or None,
            movement_description=part.movement_description or None,
            content=part.content,
            controls=PartControls(
                can_move_up=index > 0,
                can_move_down=index < last,
            )
            if editing
            else None,
        )
        for index, part in enumerate(view_model.parts)
    ]

    return PageView(
        mode=view_model.mode,
        sections=sections,
        show_empty_state=not sections,
        show_add_button=editing,
        show_logout_button=view_model.authenticated,
        mode_toggle_label="Exit edit mode" if editing else "Enter edit mode",
        form=view_model.form,
        login_open=view_model.login.open,
        login_error=view_model.login.error,
        message=view_model.message,
        scroll_target=view_model.scroll_target,
    )


# ══════════════════════════════════════════════════════════════════════════
# HTML
# ══════════════════════════════════════════════════════════════════════════

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

jinja_env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(["html", "xml"]),
)


def render_html(page: PageView) -> str:
    """Serialize a PageView into a standalone, autoescaped HTML document."""
    return jinja_env.get_template("index.html").render(page=page)
