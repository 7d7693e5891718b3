"""
操作日志中间件

Writes one JSON line per login, logout and server registration to the audit
log, without touching the route handlers.
"""

import json
import logging
import logging.handlers
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from .auth.session import SessionTokenError, read_session_token
from .config import settings


class OperationAuditMiddleware(BaseHTTPMiddleware):
    """操作审计中间件"""

    # (method, path) pairs that change data or session state
    AUDIT_ROUTES = {
        ("POST", "/servers"),
        ("GET", "/auth/google/callback"),
        ("GET", "/logout"),
    }

    def __init__(self, app: ASGIApp):
        super().__init__(app)
        self._setup_logger()

    def _setup_logger(self):
        """设置操作日志记录器"""
        if not settings.audit.enabled:
            self.logger = None
            return

        logs_dir = Path(settings.logs_dir)
        logs_dir.mkdir(parents=True, exist_ok=True)

        self.logger = logging.getLogger("operation_audit")
        self.logger.setLevel(logging.INFO)

        # 避免重复添加handler
        if not self.logger.handlers:
            log_file = logs_dir / settings.audit.log_file
            file_handler = logging.handlers.TimedRotatingFileHandler(
                log_file, when="midnight", encoding="utf-8"
            )
            file_handler.setLevel(logging.INFO)
            file_handler.setFormatter(logging.Formatter("%(message)s"))
            self.logger.addHandler(file_handler)

            # 不传播到根logger，避免重复记录
            self.logger.propagate = False

    def _should_audit_request(self, request: Request) -> bool:
        if not settings.audit.enabled or not self.logger:
            return False
        return (request.method.upper(), request.url.path) in self.AUDIT_ROUTES

    def _mask_sensitive_data(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """掩码敏感数据"""
        if not isinstance(data, dict):
            return data

        sensitive = {field.lower() for field in settings.audit.sensitive_fields}
        masked_data = {}
        for key, value in data.items():
            if key.lower() in sensitive:
                masked_data[key] = "***MASKED***"
            elif isinstance(value, dict):
                masked_data[key] = self._mask_sensitive_data(value)
            else:
                masked_data[key] = value
        return masked_data

    def _get_user_info(self, request: Request) -> Optional[Dict[str, Any]]:
        """获取当前用户信息"""
        token = request.cookies.get(settings.session.cookie_name)
        if not token:
            return None

        try:
            user = read_session_token(token)
        except SessionTokenError:
            return None

        return {"user_id": user.id, "display_name": user.displayName}

    async def _read_request_body(self, request: Request) -> Optional[Any]:
        """读取请求体"""
        if not settings.audit.log_request_body:
            return None

        body_bytes = await request.body()
        if not body_bytes:
            return None

        if len(body_bytes) > settings.audit.max_body_size:
            return {"error": "Request body too large for logging"}

        try:
            return self._mask_sensitive_data(json.loads(body_bytes.decode("utf-8")))
        except (json.JSONDecodeError, UnicodeDecodeError):
            return {"raw_body": body_bytes.decode("utf-8", errors="replace")}

    def _get_client_ip(self, request: Request) -> Optional[str]:
        """获取客户端IP地址"""
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()

        real_ip = request.headers.get("X-Real-IP")
        if real_ip:
            return real_ip

        if request.client:
            return request.client.host

        return None

    def _create_log_entry(
        self,
        request: Request,
        response: Response,
        user_info: Optional[Dict[str, Any]],
        request_body: Optional[Any],
        processing_time: float,
    ) -> str:
        """创建日志条目"""
        query_params = dict(request.query_params) if request.query_params else {}

        log_data = {
            "timestamp": datetime.now().isoformat(),
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "processing_time_ms": round(processing_time * 1000, 2),
            "client_ip": self._get_client_ip(request),
            "user_agent": request.headers.get("user-agent"),
        }

        if user_info:
            log_data.update(user_info)
        else:
            log_data.update({"user_id": None, "display_name": "anonymous"})

        if query_params:
            log_data["query_params"] = self._mask_sensitive_data(query_params)
        if request_body:
            log_data["request_body"] = request_body

        log_data["success"] = 200 <= response.status_code < 400

        return json.dumps(log_data, ensure_ascii=False)

    async def dispatch(self, request: Request, call_next):
        if not self._should_audit_request(request):
            return await call_next(request)

        start_time = time.perf_counter()

        # 在请求处理前获取用户信息，登出后 cookie 就失效了
        user_info = self._get_user_info(request)
        request_body = await self._read_request_body(request)

        try:
            response = await call_next(request)
        except Exception:
            processing_time = time.perf_counter() - start_time
            error_response = JSONResponse(
                status_code=500, content={"detail": "Internal Server Error"}
            )
            self.logger.info(
                self._create_log_entry(
                    request, error_response, user_info, request_body, processing_time
                )
            )
            raise

        processing_time = time.perf_counter() - start_time
        self.logger.info(
            self._create_log_entry(
                request, response, user_info, request_body, processing_time
            )
        )
        return response
