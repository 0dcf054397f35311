# celery_app.py  ─────────────────────────────────────────────────────────
import logging
import logging.config

from celery import Celery
from celery.signals import worker_ready

from poolwatch.config.settings import CELERY_BROKER_URL, CELERY_RESULT_BACKEND, CollectorSettings

# ── 1.  Broker / backend  ────────────────────────────────────
celery_app = Celery(
    "poolwatch",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# ── 2.  Core config, Beat & routing ───────────────────────────
celery_app.conf.update(
    task_serializer       ='json',
    result_serializer     ='json',
    accept_content        =['json'],
    timezone              ='UTC',
    enable_utc            =True,

    # --- RedBeat keeps the schedule in redis, so one beat survives restarts
    beat_scheduler        ="redbeat.RedBeatScheduler",
    redbeat_redis_url     =CELERY_BROKER_URL,

    worker_max_tasks_per_child = 200,
)

# ── 3.  Beat schedule – one entry per collector task ──────────
_settings = CollectorSettings.from_env()
celery_app.conf.beat_schedule = {
    "pool-list-refresh": {
        "task": "refresh_pool_list",
        "schedule": _settings.update_interval,
        "options": {"queue": "collector"},
    },
    "pool-status-poll": {
        "task": "poll_pool_status",
        "schedule": _settings.polling_interval,
        "options": {"queue": "collector"},
    },
    "pool-blocks-poll": {
        "task": "poll_pool_blocks",
        "schedule": _settings.polling_interval,
        "options": {"queue": "collector"},
    },
}

# ── 4.  Logging ────────────────────────────────────────────
LOGGING_CONFIG = {
    "version": 1,
    "filters": {
        "shortname": {"()": "poolwatch.utils.shortname.ShortNameFilter"},
    },
    "formatters": {
        "custom": {
            "format": "[%(asctime)s] [%(levelname)s] %(shortname)s: %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        }
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "custom", "filters": ["shortname"]},
    },
    "root": {"level": "INFO", "handlers": ["console"]},
}
celery_app.conf.worker_hijack_root_logger = False
logging.config.dictConfig(LOGGING_CONFIG)


# ── 5.  Prime the cache as soon as a worker is up ─────────────
@worker_ready.connect
def _refresh_on_start(sender=None, **kwargs):
    celery_app.send_task("refresh_pool_list", queue="collector")


# ── 6.  Register task modules ─────────────────────────────────
import poolwatch.scheduler.dispatcher
