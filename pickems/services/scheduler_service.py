"""
Pickems Leaderboard Scheduler Service

Periodically recomputes stored leaderboards in the background using
APScheduler, so scores stay right even when results were written outside the
admin UI (CLI, direct database edits).
"""

import atexit
import logging
from datetime import datetime, timezone

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.exc import SQLAlchemyError

from pickems import db
from pickems.models import Tournament
from pickems.services.leaderboard_service import recompute_leaderboard

logger = logging.getLogger(__name__)


class SchedulerService:
    """Manages background leaderboard refresh jobs"""

    def __init__(self, app=None):
        self.scheduler = None
        self.app = app
        self.is_running = False
        self.refresh_stats = {
            "last_refresh": None,
            "total_refreshes": 0,
            "successful_refreshes": 0,
            "failed_refreshes": 0,
            "last_error": None,
        }

        if app:
            self.init_app(app)

    def init_app(self, app):
        """Initialize scheduler with Flask app"""
        self.app = app
        self.scheduler = BackgroundScheduler(daemon=True, timezone="UTC")

        atexit.register(self.shutdown)

        if app.config.get("SCHEDULER_ENABLED", True):
            self.start()

    def start(self):
        """Start the background scheduler"""
        if self.is_running:
            return

        try:
            self.scheduler.remove_all_jobs()
            self._add_core_jobs()
            self.scheduler.start()
            self.is_running = True

            logger.info("Scheduler started successfully")

        except Exception as e:
            logger.error(f"Failed to start scheduler: {e}")
            raise

    def stop(self):
        """Stop the background scheduler"""
        if not self.is_running:
            return

        self.scheduler.shutdown(wait=False)
        self.is_running = False
        logger.info("Scheduler stopped")

    def shutdown(self):
        """Graceful shutdown"""
        self.stop()

    def _add_core_jobs(self):
        minutes = self.app.config.get("LEADERBOARD_REFRESH_MINUTES", 10)

        self.scheduler.add_job(
            func=self._refresh_active_leaderboard,
            trigger=IntervalTrigger(minutes=minutes),
            id="refresh_leaderboard",
            name="Refresh Active Leaderboard",
            max_instances=1,
            coalesce=True,
            misfire_grace_time=60,
        )

        # Nightly pass over every tournament (3 AM UTC)
        self.scheduler.add_job(
            func=self._recompute_all_leaderboards,
            trigger=CronTrigger(hour=3, minute=0),
            id="recompute_all",
            name="Recompute All Leaderboards",
            max_instances=1,
            coalesce=True,
            misfire_grace_time=3600,
        )

        logger.info(f"Core scheduled jobs added (refresh every {minutes} min)")

    def _refresh_active_leaderboard(self):
        with self.app.app_context():
            tournament = Tournament.get_current_tournament()
            if not tournament:
                return

            entries, message = recompute_leaderboard(tournament.id)
            self._update_stats(entries is not None, None if entries is not None else message)
            if entries is None:
                logger.warning(f"Scheduled refresh failed: {message}")

    def _recompute_all_leaderboards(self):
        with self.app.app_context():
            try:
                tournament_ids = [t.id for t in Tournament.query.all()]
            except SQLAlchemyError as e:
                db.session.rollback()
                self._update_stats(False, str(e))
                logger.error(f"Could not list tournaments: {e}", exc_info=True)
                return

            failures = 0
            for tournament_id in tournament_ids:
                entries, message = recompute_leaderboard(tournament_id, broadcast=False)
                if entries is None:
                    failures += 1
                    logger.warning(f"Recompute of tournament {tournament_id} failed: {message}")

            self._update_stats(failures == 0, f"{failures} tournaments failed" if failures else None)
            logger.info(f"Nightly recompute finished for {len(tournament_ids)} tournaments")

    def _update_stats(self, success, error=None):
        self.refresh_stats["last_refresh"] = datetime.now(timezone.utc)
        self.refresh_stats["total_refreshes"] += 1

        if success:
            self.refresh_stats["successful_refreshes"] += 1
            self.refresh_stats["last_error"] = None
        else:
            self.refresh_stats["failed_refreshes"] += 1
            self.refresh_stats["last_error"] = error

    def get_status(self):
        """Get scheduler status information"""
        jobs = []
        if self.scheduler and self.is_running:
            for job in self.scheduler.get_jobs():
                next_run = job.next_run_time
                jobs.append(
                    {
                        "id": job.id,
                        "name": job.name,
                        "next_run": next_run.isoformat() if next_run else None,
                        "trigger": str(job.trigger),
                    }
                )

        stats = dict(self.refresh_stats)
        if stats["last_refresh"]:
            stats["last_refresh"] = stats["last_refresh"].isoformat()

        return {"is_running": self.is_running, "jobs": jobs, "stats": stats}

    def force_refresh(self, scope="active"):
        """Manually run a refresh job"""
        if self.app is None:
            return False, "Scheduler is not configured"
        if scope == "active":
            self._refresh_active_leaderboard()
        elif scope == "all":
            self._recompute_all_leaderboards()
        else:
            return False, f"Unknown refresh scope: {scope}"
        return True, f"Manual {scope} refresh completed"

    def pause_job(self, job_id):
        """Pause a specific job"""
        if not self.is_running or not self.scheduler.get_job(job_id):
            return False, f"Job {job_id} not found"
        self.scheduler.pause_job(job_id)
        return True, f"Job {job_id} paused"

    def resume_job(self, job_id):
        """Resume a specific job"""
        if not self.is_running or not self.scheduler.get_job(job_id):
            return False, f"Job {job_id} not found"
        self.scheduler.resume_job(job_id)
        return True, f"Job {job_id} resumed"


# Global scheduler instance
scheduler_service = SchedulerService()
