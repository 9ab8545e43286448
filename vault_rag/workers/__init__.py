"""
Celery workers module.

Background processing for single-item reindex jobs. Workers log through
the same handler and format as the API.

Dependencies: celery, vault_rag.configs, vault_rag.observability
System role: Background task processing
"""

from celery import Celery
from celery.signals import setup_logging

from vault_rag.configs import get_settings
from vault_rag.observability.logger import configure_logging

settings = get_settings()
celery_config = settings.celery

celery_app = Celery(
    "vault_rag",
    broker=celery_config.broker_url,
    backend=celery_config.result_backend_url,
    include=["vault_rag.workers.tasks.reindex"],
)

celery_app.conf.update(
    task_serializer=celery_config.task_serializer,
    result_serializer=celery_config.result_serializer,
    accept_content=celery_config.accept_content,
    timezone=celery_config.timezone,
    task_always_eager=celery_config.task_always_eager,
)


@setup_logging.connect
def configure_worker_logging(**kwargs) -> None:
    configure_logging(settings.log_level, f"{settings.service_name}-worker")
