"""HTTP route definitions for the service."""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile, status

from app.schemas import (
    AnalysisRequest,
    AnalysisResponse,
    DashboardResponse,
    DeleteResponse,
    FileMetadata,
    FileRenameRequest,
    InsightsResponse,
)
from models.records import FileType
from services.dashboard import DashboardService, build_default_dashboard
from services.files import FileService
from services.insights import InsightServiceError

router = APIRouter()


def get_dashboard() -> DashboardService:
    return build_default_dashboard()


def get_files(dashboard: DashboardService = Depends(get_dashboard)) -> FileService:
    return dashboard.files


def _not_found(exc: KeyError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=exc.args[0] if exc.args else "Not found.",
    )


@router.get(
    "/files",
    response_model=list[FileMetadata],
    summary="List stored files, newest first.",
)
async def list_files(files: FileService = Depends(get_files)) -> list[FileMetadata]:
    return files.list_files()


@router.post(
    "/files",
    status_code=status.HTTP_201_CREATED,
    response_model=FileMetadata,
    summary="Upload a sensor data file.",
)
async def upload_file(
    file: UploadFile = File(..., description="CSV file containing sensor readings."),
    files: FileService = Depends(get_files),
) -> FileMetadata:
    contents = await file.read()
    await file.close()
    try:
        return files.upload(contents, file.filename)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc


@router.patch(
    "/files/{file_id}",
    response_model=FileMetadata,
    summary="Rename a stored file.",
)
async def rename_file(
    file_id: str,
    payload: FileRenameRequest,
    files: FileService = Depends(get_files),
) -> FileMetadata:
    try:
        return files.rename(file_id, payload.name)
    except KeyError as exc:
        raise _not_found(exc) from exc
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc


@router.delete(
    "/files/{file_id}",
    response_model=DeleteResponse,
    summary="Delete a stored file and its cached insights.",
)
async def delete_file(
    file_id: str,
    dashboard: DashboardService = Depends(get_dashboard),
) -> DeleteResponse:
    deleted = dashboard.files.delete(file_id)
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"File {file_id!r} not found.",
        )
    dashboard.forget(file_id)
    return DeleteResponse(deleted=True)


@router.get(
    "/files/{file_id}/content",
    summary="Download the raw stored file.",
)
async def get_file_content(
    file_id: str,
    files: FileService = Depends(get_files),
) -> Response:
    try:
        metadata = files.get(file_id)
        data = files.read_bytes(file_id)
    except KeyError as exc:
        raise _not_found(exc) from exc
    return Response(
        content=data,
        media_type="text/csv" if metadata.file_type is FileType.csv else "application/octet-stream",
        headers={"Content-Disposition": f'inline; filename="{metadata.name}"'},
    )


@router.get(
    "/files/{file_id}/dashboard",
    response_model=DashboardResponse,
    summary="Parsed series, statistics and charts for a file.",
)
async def get_dashboard_view(
    file_id: str,
    dashboard: DashboardService = Depends(get_dashboard),
) -> DashboardResponse:
    try:
        return dashboard.build_dashboard(file_id)
    except KeyError as exc:
        raise _not_found(exc) from exc


@router.get(
    "/files/{file_id}/insights",
    response_model=InsightsResponse,
    summary="Most recently generated insights for a file.",
)
async def get_insights(
    file_id: str,
    dashboard: DashboardService = Depends(get_dashboard),
) -> InsightsResponse:
    try:
        return dashboard.latest_insights(file_id)
    except KeyError as exc:
        raise _not_found(exc) from exc


@router.post(
    "/files/{file_id}/insights",
    response_model=InsightsResponse,
    summary="Generate fresh insights for a file.",
)
async def refresh_insights(
    file_id: str,
    dashboard: DashboardService = Depends(get_dashboard),
) -> InsightsResponse:
    try:
        return await dashboard.refresh_insights(file_id)
    except KeyError as exc:
        raise _not_found(exc) from exc


@router.post(
    "/files/{file_id}/analysis",
    response_model=AnalysisResponse,
    summary="Ask a free-form question about a file.",
)
async def analyze_file(
    file_id: str,
    payload: AnalysisRequest,
    dashboard: DashboardService = Depends(get_dashboard),
) -> AnalysisResponse:
    try:
        return await dashboard.analyze(file_id, payload.question)
    except KeyError as exc:
        raise _not_found(exc) from exc
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except InsightServiceError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=str(exc),
        ) from exc


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /ui for the dashboard and /health for status."}
