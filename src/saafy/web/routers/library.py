"""Library router: listening history, preferences and active toasts."""

from fastapi import APIRouter, Depends, HTTPException

from saafy.context import AppContext

from ..deps import get_ctx
from ..schemas import ThemeRequest

router = APIRouter()


@router.get("/history")
async def get_history(ctx: AppContext = Depends(get_ctx)):
    return [song.to_dict() for song in ctx.history.entries()]


@router.delete("/history")
async def clear_history(ctx: AppContext = Depends(get_ctx)):
    ctx.history.clear()
    return []


@router.get("/preferences")
async def get_preferences(ctx: AppContext = Depends(get_ctx)):
    return ctx.preferences.to_dict()


@router.put("/preferences/theme")
async def set_theme(request: ThemeRequest, ctx: AppContext = Depends(get_ctx)):
    ctx.preferences.set_theme(request.theme)
    return ctx.preferences.to_dict()


@router.post("/preferences/theme/toggle")
async def toggle_theme(ctx: AppContext = Depends(get_ctx)):
    ctx.preferences.toggle_theme()
    return ctx.preferences.to_dict()


@router.post("/preferences/keyboard-hints")
async def mark_keyboard_hints_seen(ctx: AppContext = Depends(get_ctx)):
    ctx.preferences.mark_keyboard_hints_seen()
    return ctx.preferences.to_dict()


@router.get("/toasts")
async def get_toasts(ctx: AppContext = Depends(get_ctx)):
    return [toast.to_dict() for toast in ctx.toasts.active()]


@router.delete("/toasts/{toast_id}")
async def dismiss_toast(toast_id: int, ctx: AppContext = Depends(get_ctx)):
    if not ctx.toasts.remove(toast_id):
        raise HTTPException(404, f"Toast {toast_id} not found")
    return {"ok": True}
