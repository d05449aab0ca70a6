from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.responses import Response

from ..domain.models import User
from ..logs import LogContext
from ..services.backup_svc import export_backup, import_backup
from .deps import require_admin

router = APIRouter()


@router.post("/api/backup")
def api_backup(admin: User = Depends(require_admin)):
    log = LogContext("EXPORT_BACKUP", admin.id)
    try:
        content = export_backup()
        log.write("OK")
    except Exception as e:
        log.write("ERROR", str(e))
        raise HTTPException(status_code=500, detail=f"backup failed: {e}")
    filename = f"parnaso_backup_{datetime.now().strftime('%d-%m-%Y')}.json"
    return Response(
        content=content,
        media_type="application/json",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@router.post("/api/restore")
async def api_restore(file: UploadFile = File(...), admin: User = Depends(require_admin)):
    log = LogContext("IMPORT_BACKUP", admin.id)
    log.set_payload({"filename": file.filename})
    if not (file.filename or "").endswith(".json"):
        log.write("ERROR", "not_json_file")
        raise HTTPException(status_code=400, detail="only .json backup files are accepted")

    raw = await file.read()
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError:
        log.write("ERROR", "not_utf8")
        raise HTTPException(status_code=400, detail="backup file must be UTF-8 JSON")

    count = import_backup(text, log)
    if count == 0:
        log.write("ERROR", "nothing_imported")
        raise HTTPException(status_code=400, detail="invalid backup: no parnaso_ keys imported")
    log.write("OK")
    return {"message": "ok", "imported": count}
