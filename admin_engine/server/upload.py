"""
文件上传路由
上传的文件以随机文件名保存到上传目录，通过 /uploads/{name} 访问
"""

import uuid
from pathlib import Path

from fastapi import APIRouter, File, Request, UploadFile
from fastapi.responses import FileResponse, JSONResponse


def create_upload_router(upload_dir: Path) -> APIRouter:
    """
    创建上传路由

    Args:
        upload_dir: 文件保存目录（按需创建）
    """
    router = APIRouter()

    @router.post("/upload")
    async def upload_file(request: Request, file: UploadFile = File(...)):
        content = await file.read()
        if not content:
            return JSONResponse(status_code=400, content={"success": False, "message": "file is required"})

        name = file.filename or ""
        suffix = Path(name).suffix
        filename = f"{uuid.uuid4().hex}{suffix}"

        upload_dir.mkdir(parents=True, exist_ok=True)
        (upload_dir / filename).write_bytes(content)
        print(f"[upload] 已保存 {name} -> {filename} ({len(content)} bytes)")

        url = str(request.url_for("get_upload", name=filename))
        return {"success": True, "url": url}

    @router.get("/uploads/{name}", name="get_upload")
    async def get_upload(name: str):
        path = upload_dir / name
        # 只允许访问上传目录下的文件名
        if Path(name).name != name or not path.is_file():
            return JSONResponse(status_code=404, content={"success": False, "message": "File not found"})
        return FileResponse(path, headers={"Cache-Control": "public, max-age=31536000, immutable"})

    return router
