from __future__ import annotations

import logging
import re
from contextlib import asynccontextmanager
from pathlib import PurePath
from typing import Optional
from urllib.parse import quote

from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response

from app.config import settings
from app.palettes.errors import PaletteError
from app.palettes.export import ExportFormat, Region, export_range, export_region, format_for_filename
from app.palettes.inspect import inspect_entry, inspect_palette
from app.palettes.store import REGION_SIZES, PaletteStore, Platform, region_size_for

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle handler."""
    logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))
    logger.info("Palette inspector ready (default platform: %s)", settings.default_platform)

    yield

    logger.info("Shutting down")


app = FastAPI(
    title="Palette Inspector",
    version=VERSION,
    lifespan=lifespan,
)

# CORS
origins = settings.cors_origins.split(",") if settings.cors_origins != "*" else ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

VALID_PLATFORMS = {p.value for p in Platform}
VALID_FORMATS = {f.value for f in ExportFormat}
VALID_REGIONS = {r.value for r in Region}


def _invalid_parameter(message: str) -> HTTPException:
    return HTTPException(
        status_code=422,
        detail={"error": "invalid_parameter", "message": message},
    )


def _content_disposition(name: str) -> str:
    """Attachment header for a client-supplied file name (basename only, RFC 6266 encoded)."""
    base = PurePath(name.replace("\\", "/")).name or "palette"
    fallback = base.encode("ascii", "replace").decode("ascii")
    fallback = re.sub(r'[?"\\\x00-\x1f\x7f]', "_", fallback)
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(base, safe='')}"


async def _load_store(palette: UploadFile, platform: str) -> PaletteStore:
    """Read an uploaded palette dump into a fresh store."""
    if platform not in VALID_PLATFORMS:
        raise _invalid_parameter(f"platform must be one of {sorted(VALID_PLATFORMS)}")

    data = await palette.read()
    if len(data) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=400,
            detail={
                "error": "palette_too_large",
                "message": f"Palette dump exceeds {settings.max_upload_bytes} bytes.",
            },
        )

    store = PaletteStore()
    try:
        store.load_bytes(data, region_size_for(platform))
    except PaletteError as e:
        raise HTTPException(
            status_code=422,
            detail={"error": "invalid_palette", "message": str(e)},
        )
    return store


@app.get("/api/health")
async def health():
    return {"status": "healthy", "version": VERSION}


@app.get("/api/platforms")
async def platforms():
    return {
        "platforms": [
            {"name": p.value, "region_size": size, "entries": 2 * size}
            for p, size in REGION_SIZES.items()
        ]
    }


@app.get("/api/formats")
async def formats():
    return {
        "formats": [
            {
                "name": f.value,
                "description": f.description,
                "extension": f.extension,
                "media_type": f.media_type,
            }
            for f in ExportFormat
        ]
    }


@app.post("/api/palette/inspect")
async def inspect(
    palette: UploadFile = File(...),
    platform: str = Form(settings.default_platform),
    index: Optional[int] = Form(None),
):
    store = await _load_store(palette, platform)

    if index is not None:
        try:
            row = inspect_entry(store, index)
        except PaletteError as e:
            raise _invalid_parameter(str(e))
        return row.to_dict()

    return {
        "platform": platform,
        "region_size": store.region_size,
        "entries": [row.to_dict() for row in inspect_palette(store)],
    }


@app.post("/api/palette/export")
async def export(
    palette: UploadFile = File(...),
    platform: str = Form(settings.default_platform),
    format: Optional[str] = Form(None),
    filename: Optional[str] = Form(None),
    region: Optional[str] = Form(None),
    start: Optional[int] = Form(None),
    length: Optional[int] = Form(None),
):
    # Resolve format: explicit name first, then the requested file's extension
    fmt = None
    if format is not None:
        if format not in VALID_FORMATS:
            raise _invalid_parameter(f"format must be one of {sorted(VALID_FORMATS)}")
        fmt = ExportFormat(format)
    elif filename:
        fmt = format_for_filename(filename)
    if fmt is None:
        raise _invalid_parameter("format is required (or a filename ending in .pal or .act)")

    if region is not None and region not in VALID_REGIONS:
        raise _invalid_parameter(f"region must be one of {sorted(VALID_REGIONS)}")
    if region is not None and (start is not None or length is not None):
        raise _invalid_parameter("give either region or start and length, not both")
    if region is None and (start is None or length is None):
        raise _invalid_parameter("either region or both start and length must be given")
    if (start is not None and start < 0) or (length is not None and length < 0):
        raise _invalid_parameter("start and length must be non-negative")

    store = await _load_store(palette, platform)

    try:
        if region is not None:
            result = export_region(store, region, fmt)
        else:
            result = export_range(store, start, length, fmt)
    except PaletteError as e:
        logger.warning("Palette export rejected: %s", e)
        raise HTTPException(
            status_code=422,
            detail={"error": "export_failed", "message": str(e)},
        )

    headers = {
        "X-Palette-Start": str(result.window.start),
        "X-Palette-Length": str(result.window.length),
    }
    if result.data is None:
        return Response(status_code=204, headers=headers)

    out_name = filename or f"palette-{region or result.window.start}{fmt.extension}"
    headers["Content-Disposition"] = _content_disposition(out_name)
    return Response(content=result.data, media_type=fmt.media_type, headers=headers)
