"""
Health checks and monitoring with Prometheus metrics
"""
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi.responses import Response
import time
import psutil
import structlog

from app import config
from app.services.session_store import session_store

logger = structlog.get_logger()

# Prometheus metrics
REQUEST_COUNT = Counter('http_requests_total', 'Total HTTP requests', ['method', 'endpoint', 'status'])
REQUEST_DURATION = Histogram('http_request_duration_seconds', 'HTTP request duration', ['method', 'endpoint'])
# status is one of: table, model, fallback, error
AI_GENERATION_REQUESTS = Counter('ai_generation_requests_total', 'Total AI generation requests', ['type', 'status'])


def record_generation(kind: str, status: str) -> None:
    AI_GENERATION_REQUESTS.labels(type=kind, status=status).inc()


class HealthChecker:
    def __init__(self, store=session_store):
        self.start_time = time.time()
        self.store = store

    def check_store(self) -> dict:
        """Round-trip a value through the session store"""
        try:
            test_key = "health_check_test"
            self.store.set(test_key, "test_value", expire=10)
            value = self.store.get(test_key)
            self.store.delete(test_key)

            if value == "test_value":
                return {
                    "status": "healthy",
                    "message": "Store operations successful",
                    "backend": self.store.backend
                }
            return {
                "status": "unhealthy",
                "message": "Store operations failed",
                "backend": self.store.backend
            }
        except Exception as e:
            logger.error(f"Store health check failed: {e}")
            return {
                "status": "unhealthy",
                "message": f"Store connection failed: {str(e)}"
            }

    def check_model(self) -> dict:
        """The model is optional; without a key every generator uses fallbacks"""
        if config.OPENAI_API_KEY:
            return {
                "status": "healthy",
                "message": "Text model configured",
                "model": config.OPENAI_MODEL
            }
        return {
            "status": "healthy",
            "message": "Text model not configured, serving fallback content",
            "model": None
        }

    def get_system_metrics(self) -> dict:
        """Get system resource metrics"""
        try:
            memory = psutil.virtual_memory()
            return {
                "cpu_percent": psutil.cpu_percent(interval=None),
                "memory_percent": memory.percent,
                "memory_available_gb": round(memory.available / (1024**3), 2),
                "uptime_seconds": time.time() - self.start_time
            }
        except Exception as e:
            logger.error(f"System metrics collection failed: {e}")
            return {"error": str(e)}

    def get_health_status(self) -> dict:
        """Get overall health status"""
        checks = {
            "store": self.check_store(),
            "model": self.check_model(),
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


# Global health checker instance
health_checker = HealthChecker()


def get_metrics():
    """Get Prometheus metrics"""
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
