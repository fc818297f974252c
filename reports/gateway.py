import logging

import django_rq
from django.conf import settings
from django.db import transaction
from redis.exceptions import RedisError
from rest_framework.exceptions import NotFound
from rq.job import JobStatus

from . import lifecycle
from .exceptions import QueuePublishFailure
from .models import Report
from .tasks import generate_report

logger = logging.getLogger(__name__)

WAITING_JOB_STATUSES = {JobStatus.QUEUED, JobStatus.SCHEDULED, JobStatus.DEFERRED}


def get_report_queue():
    return django_rq.get_queue(settings.REPORT_QUEUE)


def _job_waiting(queue, job_id):
    if not job_id:
        return False
    job = queue.fetch_job(job_id)
    return job is not None and job.get_status() in WAITING_JOB_STATUSES


def enqueue_report(report_id):
    """
    Publish a generation job for an existing report.

    pending stays pending, failed is reset to pending (error and output
    cleared); processing and completed are refused. Nothing is published
    when a job for this report is still waiting on the queue. If the
    queue cannot be reached the reset is rolled back.
    """
    queue = get_report_queue()

    # The row lock is held until the publish returns; a worker that picks
    # the job up early blocks on its claim until this commits.
    with transaction.atomic():
        try:
            report = Report.objects.select_for_update().get(pk=report_id)
        except Report.DoesNotExist:
            raise NotFound(f"Report {report_id} not found.")

        try:
            if report.status == Report.FAILED:
                report = lifecycle.reset_report(report.pk)
            elif report.status == Report.PENDING:
                if _job_waiting(queue, report.job_id):
                    logger.info(f"Report {report.pk} already has job {report.job_id} waiting, not publishing again")
                    return report
            else:
                lifecycle.check_transition(report.status, Report.PENDING)

            job = queue.enqueue(
                generate_report,
                report.pk,
                job_timeout=settings.REPORT_JOB_TIMEOUT,
            )
        except RedisError as exc:
            logger.error(f"Could not publish report {report.pk} to queue '{queue.name}': {exc}", exc_info=True)
            raise QueuePublishFailure() from exc

        Report.objects.filter(pk=report.pk).update(job_id=job.id)
        report.job_id = job.id

    logger.info(f"Report {report.pk} enqueued as job {job.id} on '{queue.name}'")
    return report


def create_and_enqueue(report_type, filters, requested_by=None):
    """
    Create a report and publish it in one call. If the publish fails the
    report is kept as pending so it can be enqueued later.
    """
    report = lifecycle.create_report(report_type, filters, requested_by=requested_by)
    try:
        return enqueue_report(report.pk)
    except QueuePublishFailure:
        logger.warning(f"Report {report.pk} created but left pending, queue unavailable")
        raise


def queue_length():
    """Jobs waiting on the report queue, or None when Redis is unreachable."""
    try:
        return get_report_queue().count
    except RedisError as exc:
        logger.warning(f"Could not read report queue length: {exc}")
        return None
