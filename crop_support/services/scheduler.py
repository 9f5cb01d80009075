# Periodic task runner
import logging
import threading

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.jobstores.base import JobLookupError

logger = logging.getLogger(__name__)

DEFAULT_TASKS = ('mandi-prices', 'schemes')


class TaskRunner:
    """Named fixed-interval jobs on an APScheduler background thread.

    Each name owns at most one job. Ticks run inside an application context,
    and a failing tick is logged without cancelling the schedule.
    """

    def __init__(self, app, scheduler=None, known_tasks=DEFAULT_TASKS):
        self.app = app
        self.scheduler = scheduler or BackgroundScheduler(daemon=True, timezone='UTC')
        self._known = list(known_tasks)
        self._actions = {}
        self._intervals = {}
        self._lock = threading.Lock()

    def _ensure_started(self):
        if not self.scheduler.running:
            self.scheduler.start()

    def start(self, name, interval_seconds, action):
        if interval_seconds <= 0:
            raise ValueError('interval_seconds must be positive')
        with self._lock:
            self._ensure_started()
            self._actions[name] = action
            self._intervals[name] = interval_seconds
            if name not in self._known:
                self._known.append(name)
            self.scheduler.add_job(
                self._tick, trigger='interval', seconds=interval_seconds, args=[name],
                id=name, name=name, replace_existing=True, max_instances=1, coalesce=True,
            )
        logger.info('Scheduled task %s every %ss', name, interval_seconds)

    def stop(self, name):
        with self._lock:
            try:
                self.scheduler.remove_job(name)
            except JobLookupError:
                return False
            self._intervals.pop(name, None)
        logger.info('Stopped scheduled task: %s', name)
        return True

    def stop_all(self):
        for name in list(self._known):
            self.stop(name)

    def is_running(self, name):
        return self.scheduler.get_job(name) is not None

    def status(self):
        tasks = []
        for name in self._known:
            job = self.scheduler.get_job(name)
            tasks.append({
                'name': name,
                'isRunning': job is not None,
                'intervalSeconds': self._intervals.get(name) if job is not None else None,
                'nextRunTime': job.next_run_time.isoformat() if job is not None and job.next_run_time else None,
            })
        return tasks

    def run_now(self, name, action=None):
        """Run a task once on the calling thread."""
        if action is None and name not in self._actions:
            raise KeyError(name)
        self._tick(name, action)

    def _tick(self, name, action=None):
        action = action or self._actions.get(name)
        if action is None:
            return
        with self.app.app_context():
            try:
                action()
            except Exception:
                logger.exception('Scheduled task %s failed', name)

    def shutdown(self):
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
