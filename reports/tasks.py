import logging
from io import BytesIO

import openpyxl
from django.core.files.base import ContentFile
from django.core.files.storage import default_storage
from django.db.models import Count, Q
from django.utils import timezone

from core.models import User, Milestone
from finance.models import Donation, Expense
from finance.services import finance_totals
from programs.models import Event, Attendance
from . import lifecycle
from .models import Report
from .utils import write_title, append_table, adjust_column_widths

logger = logging.getLogger(__name__)

MAX_ERROR_MESSAGE_LENGTH = 1000


def _period_label(filters):
    start, end = filters.get('start_date'), filters.get('end_date')
    if start and end:
        return f"Period: {start} to {end}"
    if start:
        return f"Period: from {start}"
    if end:
        return f"Period: until {end}"
    return "Period: all time"


def _date_filter(filters, field):
    q = Q()
    if filters.get('start_date'):
        q &= Q(**{f'{field}__gte': filters['start_date']})
    if filters.get('end_date'):
        q &= Q(**{f'{field}__lte': filters['end_date']})
    return q


def _community_members(community):
    return User.objects.in_community(community)


def _community_events(filters):
    return Event.objects.filter(
        _date_filter(filters, 'date__date'),
        community=filters['community_name'],
    )


# --- REPORT BUILDERS ---

def build_financial_summary(filters):
    start, end = filters['start_date'], filters['end_date']
    totals = finance_totals(start, end)

    wb = openpyxl.Workbook()
    sheet = wb.active
    sheet.title = "Summary"
    write_title(sheet, "Financial Summary", _period_label(filters))
    append_table(sheet, ['Metric', 'Value'], [
        ('Cash Donations', totals['cash_total']),
        ('In-Kind Donations (estimated)', totals['in_kind_total']),
        ('Total Donations', totals['donations_total']),
        ('Total Expenses', totals['expenses_total']),
        ('Net (Donations - Expenses)', totals['net']),
        ('Number of Donations', totals['donation_count']),
        ('Number of Expenses', totals['expense_count']),
    ])
    adjust_column_widths(sheet)

    donations = Donation.objects.filter(date__gte=start, date__lte=end).order_by('date')
    sheet = wb.create_sheet("Donations")
    append_table(sheet, ['Date', 'Type', 'Source', 'Program', 'Value', 'Description'], (
        (d.date, d.get_donation_type_display(), d.source, d.program, d.value, d.in_kind_description)
        for d in donations
    ))
    adjust_column_widths(sheet)

    expenses = Expense.objects.filter(date__gte=start, date__lte=end).order_by('date')
    sheet = wb.create_sheet("Expenses")
    append_table(sheet, ['Date', 'Category', 'Amount', 'Description'], (
        (e.date, e.category, e.amount, e.description) for e in expenses
    ))
    adjust_column_widths(sheet)
    return wb


def build_community_activity(filters):
    community = filters['community_name']
    events = _community_events(filters).select_related('tutor_user').annotate(
        members=Count('attendances', filter=Q(attendances__attendee_type=Attendance.MEMBER)),
        guests=Count('attendances', filter=Q(attendances__attendee_type=Attendance.GUEST)),
    ).order_by('date')

    rows = []
    total_members = total_guests = 0
    for event in events:
        tutor = event.tutor_user.name if event.tutor_user else event.tutor_name
        rows.append((
            event.date.strftime('%Y-%m-%d %H:%M'), event.name, event.location,
            f"{tutor} ({event.tutor_type})", event.members, event.guests, event.members + event.guests,
        ))
        total_members += event.members
        total_guests += event.guests

    wb = openpyxl.Workbook()
    sheet = wb.active
    sheet.title = "Community Activity"
    write_title(sheet, f"Community Activity: {community}", _period_label(filters), width=7)
    append_table(sheet, ['Metric', 'Value'], [
        ('Events Held', len(rows)),
        ('Member Attendances', total_members),
        ('Guest Attendances', total_guests),
        ('Total Attendances', total_members + total_guests),
    ])
    append_table(
        sheet,
        ['Date', 'Event', 'Location', 'Tutor', 'Members', 'Guests', 'Total'],
        rows,
        heading='Events',
    )
    adjust_column_widths(sheet)
    return wb


def build_participant_demographics(filters):
    community = filters['community_name']
    members = _community_members(community).filter(_date_filter(filters, 'created_at__date'))

    wb = openpyxl.Workbook()
    sheet = wb.active
    sheet.title = "Demographics"
    write_title(sheet, f"Participant Demographics: {community}", _period_label(filters))
    append_table(sheet, ['Metric', 'Value'], [('Total Participants', members.count())])

    breakdowns = (
        ('Occupation', 'occupation_status'),
        ('Age Category', 'age_category'),
        ('Domicile', 'domicile'),
    )
    for label, field in breakdowns:
        counts = members.values(field).annotate(total=Count('id')).order_by('-total', field)
        append_table(
            sheet, [label, 'Participants'],
            ((row[field] or 'Unspecified', row['total']) for row in counts),
            heading=f"By {label}",
        )
    adjust_column_widths(sheet)

    sheet = wb.create_sheet("Participants")
    append_table(sheet, ['Name', 'Occupation', 'Age Category', 'Domicile', 'Joined'], (
        (u.name, u.occupation_status, u.age_category, u.domicile, u.created_at.strftime('%Y-%m-%d'))
        for u in members.order_by('name')
    ))
    adjust_column_widths(sheet)
    return wb


def build_program_impact(filters):
    community = filters['community_name']
    events = _community_events(filters)
    attendances = Attendance.objects.filter(event__in=events)
    participant_ids = set(
        attendances.filter(attendee_type=Attendance.MEMBER).values_list('attendee_user', flat=True)
    )
    milestones = Milestone.objects.filter(
        _date_filter(filters, 'date'),
        user_id__in=participant_ids,
    )

    wb = openpyxl.Workbook()
    sheet = wb.active
    sheet.title = "Program Impact"
    write_title(sheet, f"Program Impact: {community}", _period_label(filters), width=4)
    append_table(sheet, ['Metric', 'Value'], [
        ('Programs Held', events.count()),
        ('Total Attendances', attendances.count()),
        ('Unique Member Participants', len(participant_ids)),
        ('Guest Attendances', attendances.filter(attendee_type=Attendance.GUEST).count()),
        ('Milestones Reached', milestones.count()),
    ])

    by_type = dict(milestones.order_by().values_list('milestone_type').annotate(total=Count('id')))
    append_table(
        sheet, ['Milestone', 'Count'],
        ((label, by_type.get(value, 0)) for value, label in Milestone.TYPE_CHOICES),
        heading='Milestones by Type',
    )

    per_event = events.annotate(total=Count('attendances')).order_by('-total', 'name')
    append_table(
        sheet, ['Program', 'Date', 'Attendances'],
        ((e.name, e.date.strftime('%Y-%m-%d'), e.total) for e in per_event),
        heading='Attendance per Program',
    )
    adjust_column_widths(sheet)
    return wb


REPORT_BUILDERS = {
    Report.FINANCIAL_SUMMARY: build_financial_summary,
    Report.COMMUNITY_ACTIVITY: build_community_activity,
    Report.PARTICIPANT_DEMOGRAPHICS: build_participant_demographics,
    Report.PROGRAM_IMPACT: build_program_impact,
}


def _save_report_file(report, workbook):
    """Write the workbook to the default storage. Returns (key, location)."""
    buffer = BytesIO()
    workbook.save(buffer)

    file_name = f"reports/{report.report_type}_{report.pk}_{timezone.now().strftime('%Y%m%d_%H%M%S')}.xlsx"
    key = default_storage.save(file_name, ContentFile(buffer.getvalue()))
    return key, default_storage.url(key)


def _handle_task_failure(report_id, error):
    message = (str(error) or error.__class__.__name__)[:MAX_ERROR_MESSAGE_LENGTH]
    logger.error(f"Report {report_id} generation failed: {message}", exc_info=error)
    try:
        lifecycle.fail_report(report_id, message)
    except Exception:
        logger.exception(f"Could not record failure for report {report_id}")
        raise


# --- WORKER ENTRY POINT ---

def generate_report(report_id):
    """
    RQ job: claim the report, build its workbook, store it and record the
    outcome. A report that is no longer pending is left alone.
    Errors are recorded on the report and re-raised so RQ marks the job failed.
    """
    report = lifecycle.claim_report(report_id)
    if report is None:
        return None

    try:
        builder = REPORT_BUILDERS[report.report_type]
        workbook = builder(report.filters)
        key, location = _save_report_file(report, workbook)
    except Exception as e:
        _handle_task_failure(report_id, e)
        raise

    report = lifecycle.complete_report(report_id, location, key)
    logger.info(f"Report {report_id} completed, stored at {key}")
    return report.pk
