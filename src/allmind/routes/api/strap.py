"""Strap registry, shim and doctor API routes."""

import asyncio

from fastapi import APIRouter, HTTPException

from allmind.config import get_settings
from allmind.errors import RegistryError
from allmind.registry.store import read_json_document
from allmind.shims.doctor import doctor_payload, run_shim_doctor
from allmind.shims.reconciler import reconcile_from_settings, report_payload

router = APIRouter(prefix="/strap", tags=["api-strap"])


@router.get("/registry")
async def strap_registry() -> dict[str, object]:
    settings = get_settings()
    try:
        document = await asyncio.to_thread(read_json_document, settings.registry_path)
    except RegistryError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    if document is None:
        raise HTTPException(
            status_code=404, detail=f"Registry not found: {settings.registry_path}"
        )
    return document


@router.get("/config")
async def strap_config() -> dict[str, object]:
    settings = get_settings()
    try:
        document = await asyncio.to_thread(read_json_document, settings.strap_config_path)
    except RegistryError as exc:
        return {"error": str(exc)}
    return document or {"error": "Config not found"}


@router.get("/shims")
async def strap_shims() -> dict[str, object]:
    report = await asyncio.to_thread(reconcile_from_settings, get_settings())
    return report_payload(report)


@router.get("/doctor")
async def strap_doctor() -> dict[str, object]:
    checks = await asyncio.to_thread(run_shim_doctor, get_settings())
    return doctor_payload(checks)
