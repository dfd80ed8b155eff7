"""Parse Portuguese natural-language reminders into structured drafts.

Examples:
- "Reunião com cliente dia 15 de maio às 14:00"
- "Todos os dias preciso tomar remédio às 8:00"
- "me lembre de pagar a conta amanhã às 9 da manhã"

Date and time detection run through ordered rule lists. The first rule whose
pattern matches AND whose extractor succeeds wins; an extractor failure
(unknown month, impossible calendar date, hour out of range) falls through to
the next rule instead of raising.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Callable, Optional
from zoneinfo import ZoneInfo

from config import TIMEZONE
from .models import Frequency, ReminderDraft

LOCAL_TZ = ZoneInfo(TIMEZONE)

# Tested in order, first keyword set with a substring hit wins
FREQUENCY_KEYWORDS: list[tuple[Frequency, tuple[str, ...]]] = [
    (Frequency.DAILY, ('todos os dias', 'diariamente', 'todo dia')),
    (Frequency.WEEKLY, ('toda semana', 'semanalmente')),
    (Frequency.MONTHLY, ('todo mês', 'mensalmente')),
]

# Month name → 0-based index
MONTHS = {
    'janeiro': 0, 'jan': 0,
    'fevereiro': 1, 'fev': 1,
    'março': 2, 'mar': 2,
    'abril': 3, 'abr': 3,
    'maio': 4, 'mai': 4,
    'junho': 5, 'jun': 5,
    'julho': 6, 'jul': 6,
    'agosto': 7, 'ago': 7,
    'setembro': 8, 'set': 8,
    'outubro': 9, 'out': 9,
    'novembro': 10, 'nov': 10,
    'dezembro': 11, 'dez': 11,
}

TRIGGER_PHRASES = ('me lembre', 'me avise', 'não esqueça', 'lembrar de')

PERIOD_MARKER = r'(?:am|pm|da manhã|da tarde|da noite|horas?)'


@dataclass(frozen=True)
class Rule:
    """A detection rule: pattern plus extractor.

    The extractor receives the match and the reference date. Returning None or
    raising KeyError/ValueError means the rule did not match.
    """
    name: str
    pattern: re.Pattern
    extract: Callable[[re.Match, date], Any]


@dataclass(frozen=True)
class RuleMatch:
    """Result of the first successful rule."""
    rule: str
    value: Any
    start: int
    end: int


def _month_name_date(match: re.Match, today: date) -> date:
    day = int(match.group('day'))
    month = MONTHS[match.group('month')]
    year = int(match.group('year')) if match.group('year') else today.year
    return date(year, month + 1, day)


def _numeric_date(match: re.Match, today: date) -> date:
    year = int(match.group('year')) if match.group('year') else today.year
    if year < 100:
        year += 2000
    return date(year, int(match.group('month')), int(match.group('day')))


def _clock_time(match: re.Match, today: date) -> Optional[str]:
    # Not every time rule has minute/period groups
    groups = match.groupdict()
    hour = int(groups['hour'])
    minutes = groups.get('minute') or '00'
    period = groups.get('period')

    if period:
        if period == 'pm' or 'tarde' in period or 'noite' in period:
            if hour < 12:
                hour += 12
        elif period == 'am' or 'manhã' in period:
            if hour == 12:
                hour = 0

    if hour > 23 or int(minutes) > 59:
        return None

    return f"{hour:02d}:{minutes}"


DATE_RULES: list[Rule] = [
    Rule(
        'day_of_month_name',
        re.compile(r'dia (?P<day>\d{1,2}) de (?P<month>[a-zç]+)(?: de (?P<year>\d{4}))?'),
        _month_name_date,
    ),
    Rule(
        'month_name',
        re.compile(r'(?<!\d)(?P<day>\d{1,2}) de (?P<month>[a-zç]+)(?: de (?P<year>\d{4}))?'),
        _month_name_date,
    ),
    Rule('today', re.compile(r'hoje'), lambda match, today: today),
    Rule('tomorrow', re.compile(r'amanhã'), lambda match, today: today + timedelta(days=1)),
    Rule(
        'numeric',
        re.compile(r'(?<!\d)(?P<day>\d{1,2})/(?P<month>\d{1,2})(?:/(?P<year>\d{2,4}))?'),
        _numeric_date,
    ),
]

# Anchored shapes first, so a number in the label ("2 comprimidos") never
# beats "às 8:00"; a bare number is the last resort
TIME_RULES: list[Rule] = [
    Rule(
        'at',
        re.compile(
            rf'\b[àa]s (?P<hour>\d{{1,2}})(?:[:.h](?P<minute>\d{{2}})|h(?!\w))?(?!\d)'
            rf'(?:\s*(?P<period>{PERIOD_MARKER})(?!\w))?'
        ),
        _clock_time,
    ),
    Rule(
        'clock',
        re.compile(
            rf'(?<!\d)(?P<hour>\d{{1,2}})[:.h](?P<minute>\d{{2}})(?!\d)'
            rf'(?:\s*(?P<period>{PERIOD_MARKER})(?!\w))?'
        ),
        _clock_time,
    ),
    Rule(
        'period',
        re.compile(rf'(?<!\d)(?P<hour>\d{{1,2}})(?:h(?!\w)|\s*(?P<period>{PERIOD_MARKER})(?!\w))'),
        _clock_time,
    ),
    Rule('bare', re.compile(r'(?<!\d)(?P<hour>\d{1,2})(?!\d)'), _clock_time),
]

_MONTH_ALTERNATION = '|'.join(sorted(MONTHS, key=len, reverse=True))

# Same shapes as detection, used to strip dates/times out of the label
DATE_STRIP_PATTERNS = [
    re.compile(rf'\bdia \d{{1,2}} de (?:{_MONTH_ALTERNATION})(?!\w)(?: de \d{{4}})?'),
    re.compile(rf'(?<!\d)\d{{1,2}} de (?:{_MONTH_ALTERNATION})(?!\w)(?: de \d{{4}})?'),
    re.compile(r'\bhoje\b'),
    re.compile(r'\bamanhã\b'),
    re.compile(r'(?<!\d)\d{1,2}/\d{1,2}(?:/\d{2,4})?'),
]

TIME_STRIP_PATTERNS = [
    re.compile(rf'\b[àa]s \d{{1,2}}(?:[:.h]\d{{2}}|h(?!\w))?(?:\s*{PERIOD_MARKER}(?!\w))?'),
    re.compile(rf'(?<!\d)\d{{1,2}}[:.h]\d{{2}}(?:\s*{PERIOD_MARKER}(?!\w))?'),
    re.compile(rf'(?<!\d)\d{{1,2}}(?:h(?!\w)|\s*{PERIOD_MARKER}(?!\w))'),
]


def first_match(rules: list[Rule], text: str, today: date) -> Optional[RuleMatch]:
    """Evaluate rules in order and return the first successful one.

    Only the first occurrence of each pattern is considered.
    """
    for rule in rules:
        match = rule.pattern.search(text)
        if not match:
            continue
        try:
            value = rule.extract(match, today)
        except (KeyError, ValueError):
            continue
        if value is None:
            continue
        return RuleMatch(rule=rule.name, value=value, start=match.start(), end=match.end())
    return None


def detect_frequency(text: str) -> Frequency:
    """Return the recurrence named in the text, defaulting to ONCE."""
    for frequency, keywords in FREQUENCY_KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return frequency
    return Frequency.ONCE


def _clean_label(text: str, has_date: bool, time_match: Optional[RuleMatch], time_source: str) -> str:
    label = text

    for phrase in TRIGGER_PHRASES:
        label = label.replace(phrase, ' ')
    for _, keywords in FREQUENCY_KEYWORDS:
        for keyword in keywords:
            label = label.replace(keyword, ' ')

    if has_date:
        for pattern in DATE_STRIP_PATTERNS:
            label = pattern.sub(' ', label)

    if time_match:
        for pattern in TIME_STRIP_PATTERNS:
            label = pattern.sub(' ', label)
        # A bare hour ("reunião amanhã 14") survives the shapes above
        if time_match.rule == 'bare':
            token = time_source[time_match.start:time_match.end].strip()
            label = re.sub(rf'(?<!\d){re.escape(token)}(?!\d)', ' ', label, count=1)

    label = re.sub(r'\s+', ' ', label).strip()
    label = label.strip('.,;:!-–— ')
    # Connectors left dangling once the trigger phrase is gone
    label = re.sub(r'^(?:de|que|para)\s+', '', label)
    return label.strip()


def parse_reminder(text: str, today: Optional[date] = None) -> Optional[ReminderDraft]:
    """Parse a reminder from Portuguese natural language.

    Args:
        text: Free-form message text
        today: Reference date for "hoje"/"amanhã" and year defaults
            (defaults to today in the configured timezone)

    Returns:
        ReminderDraft if the text has a label and either a date or a daily
        recurrence, None otherwise
    """
    today = today or datetime.now(LOCAL_TZ).date()
    message = text.lower()

    frequency = detect_frequency(message)

    date_match = first_match(DATE_RULES, message, today)

    # Look for the time outside the date so its day number is not read as an hour
    time_source = message
    if date_match:
        time_source = message[:date_match.start] + ' ' + message[date_match.end:]
    time_match = first_match(TIME_RULES, time_source, today)

    label = _clean_label(message, date_match is not None, time_match, time_source)

    reminder_date = date_match.value if date_match else None
    if not label or not (reminder_date or frequency == Frequency.DAILY):
        return None

    if reminder_date is None:
        reminder_date = today

    return ReminderDraft(
        text=label,
        date=reminder_date,
        time=time_match.value if time_match else None,
        frequency=frequency,
    )
