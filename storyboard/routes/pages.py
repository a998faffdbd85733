"""
Storyboard Backend — Public Page
=================================

What:  GET / renders the public, read-only storyboard as HTML.
How:   Builds a view-mode ViewModel from the store and passes it through the
       same render()/render_html() pair the client controller uses.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from sqlalchemy.ext.asyncio import AsyncSession

from storyboard.client.view import Mode, ViewModel, render, render_html
from storyboard.database import get_db_session
from storyboard.services.auth_service import auth_service
from storyboard.services.part_service import part_service

router = APIRouter(tags=["Pages"])


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
async def index(request: Request, db: AsyncSession = Depends(get_db_session)) -> HTMLResponse:
    status = auth_service.status(request.session)
    view_model = ViewModel(
        parts=await part_service.list_all(db),
        mode=Mode.VIEW,
        authenticated=status["authenticated"],
        username=status.get("username"),
    )
    return HTMLResponse(content=render_html(render(view_model)))
