from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from models.records import Metric
from services.classification import format_bytes
from services.dashboard import DashboardService, build_default_dashboard


templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))
templates.env.filters["filesize"] = format_bytes

CHART_COLORS = {
    Metric.temperature: "#f87171",
    Metric.humidity: "#60a5fa",
    Metric.light: "#facc15",
    Metric.air_quality: "#4ade80",
}


def get_dashboard() -> DashboardService:
    return build_default_dashboard()


router = APIRouter(include_in_schema=False)


@router.get("/ui", name="ui_index", response_class=HTMLResponse)
async def ui_index(
    request: Request,
    dashboard: DashboardService = Depends(get_dashboard),
) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "ui/index.html",
        {"files": dashboard.files.list_files()},
    )


@router.get("/ui/files/{file_id}", name="ui_file_detail", response_class=HTMLResponse)
async def ui_file_detail(
    request: Request,
    file_id: str,
    dashboard: DashboardService = Depends(get_dashboard),
) -> HTMLResponse:
    try:
        view = dashboard.build_dashboard(file_id)
        insights = dashboard.latest_insights(file_id).insights
    except KeyError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=exc.args[0] if exc.args else "Not found.",
        ) from exc

    return templates.TemplateResponse(
        request,
        "ui/detail.html",
        {
            "view": view,
            "insights": insights,
            "metrics": list(Metric),
            "colors": CHART_COLORS,
        },
    )
