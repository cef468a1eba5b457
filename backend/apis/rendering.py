# backend/apis/rendering.py
import pathlib
from typing import Optional

from fastapi import Request
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from services.errors import AppError

BASE_DIR = pathlib.Path(__file__).resolve().parent.parent
templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))

# ids are 32-bit integer primary keys
MAX_ID = 2**31 - 1


def _fail(msg: str, status_code: int = 400) -> dict:
    return {"status": "FAIL", "statusCode": status_code, "message": msg, "data": ""}

def _success(data, message: str = "") -> dict:
    return {"status": "SUCCESS", "statusCode": 200, "message": message, "data": data}


def fail_response(err: AppError) -> JSONResponse:
    return JSONResponse(_fail(err.message, err.status_code), status_code=err.status_code)


def flash(request: Request, message: str) -> None:
    request.session["message"] = message

def pop_flash(request: Request) -> Optional[str]:
    return request.session.pop("message", None)


def redirect(url: str, message: Optional[str] = None, request: Optional[Request] = None) -> RedirectResponse:
    if message and request is not None:
        flash(request, message)
    return RedirectResponse(url, status_code=302)


def render(request: Request, name: str, context: Optional[dict] = None, status_code: int = 200):
    return templates.TemplateResponse(request, name, context or {}, status_code=status_code)
