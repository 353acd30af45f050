"""
Health checks and monitoring with Prometheus metrics
"""
import time

import psutil
import structlog
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

from app.config import Settings

logger = structlog.get_logger()

# Prometheus metrics
REQUEST_COUNT = Counter('http_requests_total', 'Total HTTP requests', ['method', 'endpoint', 'status'])
REQUEST_DURATION = Histogram('http_request_duration_seconds', 'HTTP request duration', ['method', 'endpoint'])
GENERATION_REQUESTS = Counter(
    'study_generation_requests_total',
    'Total study artifact generation requests',
    ['artifact', 'strategy', 'status']
)
UPLOADS = Counter('document_uploads_total', 'Total document uploads', ['kind', 'status'])


class HealthChecker:
    def __init__(self):
        self.start_time = time.time()

    def check_ai_provider(self, settings: Settings) -> dict:
        """Report which completion provider is configured, if any"""
        if settings.ai_enabled:
            return {
                "status": "healthy",
                "message": f"Using {settings.provider} ({settings.model})",
                "mode": "ai"
            }
        # heuristic mode is healthy
        return {
            "status": "healthy",
            "message": "No AI provider configured, heuristic fallbacks in use",
            "mode": "heuristic"
        }

    def get_system_metrics(self) -> dict:
        """Get system resource metrics"""
        try:
            memory = psutil.virtual_memory()
            disk = psutil.disk_usage('/')

            return {
                "cpu_percent": psutil.cpu_percent(interval=None),
                "memory_percent": memory.percent,
                "memory_available_gb": round(memory.available / (1024**3), 2),
                "disk_percent": disk.percent,
                "disk_free_gb": round(disk.free / (1024**3), 2),
                "uptime_seconds": time.time() - self.start_time
            }
        except Exception as e:
            logger.error("system_metrics_failed", error=str(e))
            return {"error": str(e)}

    def get_health_status(self, settings: Settings) -> dict:
        """Get overall health status"""
        checks = {
            "ai_provider": self.check_ai_provider(settings),
        }

        unhealthy_checks = [name for name, check in checks.items() if check["status"] == "unhealthy"]
        overall_status = "healthy" if not unhealthy_checks else "unhealthy"

        return {
            "status": overall_status,
            "timestamp": time.time(),
            "checks": checks,
            "system_metrics": self.get_system_metrics(),
            "unhealthy_components": unhealthy_checks
        }


health_checker = HealthChecker()


def get_metrics():
    """Get Prometheus metrics"""
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
