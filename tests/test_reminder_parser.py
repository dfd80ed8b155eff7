"""Tests for the Portuguese reminder parser."""

from datetime import date

import pytest
from freezegun import freeze_time

from domains.reminders.models import Frequency
from domains.reminders.parser import (
    DATE_RULES,
    TIME_RULES,
    detect_frequency,
    first_match,
    parse_reminder,
)

TODAY = date(2026, 5, 1)


# =============================================================================
# FULL MESSAGES
# =============================================================================

def test_meeting_with_month_name_and_time():
    draft = parse_reminder("Reunião com cliente dia 15 de maio às 14:00", today=TODAY)

    assert draft is not None
    assert draft.frequency == Frequency.ONCE
    assert draft.date == date(2026, 5, 15)
    assert draft.time == "14:00"
    assert draft.text == "reunião com cliente"


def test_daily_medicine():
    draft = parse_reminder("Todos os dias preciso tomar remédio às 8:00", today=TODAY)

    assert draft is not None
    assert draft.frequency == Frequency.DAILY
    assert draft.date == TODAY
    assert draft.time == "08:00"
    assert "tomar remédio" in draft.text
    assert "todos os dias" not in draft.text
    assert "8:00" not in draft.text
    assert "às" not in draft.text


def test_trigger_phrase_tomorrow_morning():
    draft = parse_reminder("me lembre de pagar a conta amanhã às 9 da manhã", today=TODAY)

    assert draft is not None
    assert draft.date == date(2026, 5, 2)
    assert draft.time == "09:00"
    assert draft.text == "pagar a conta"


def test_numeric_date_with_two_digit_year():
    draft = parse_reminder("dentista 20/11/26 às 10h", today=TODAY)

    assert draft is not None
    assert draft.date == date(2026, 11, 20)
    assert draft.time == "10:00"
    assert draft.text == "dentista"


def test_numeric_date_without_year_uses_current_year():
    draft = parse_reminder("renovar passaporte 3/2", today=TODAY)

    assert draft is not None
    assert draft.date == date(2026, 2, 3)
    assert draft.time is None


def test_month_abbreviation_keeps_current_year():
    # No roll-forward into next year for months already past
    draft = parse_reminder("aniversário da Ana 3 de jan", today=TODAY)

    assert draft is not None
    assert draft.date == date(2026, 1, 3)
    assert draft.text == "aniversário da ana"


def test_weekly_recurrence_with_date():
    draft = parse_reminder("Toda semana reunião de equipe dia 20 de maio às 9:30", today=TODAY)

    assert draft is not None
    assert draft.frequency == Frequency.WEEKLY
    assert draft.date == date(2026, 5, 20)
    assert draft.time == "09:30"
    assert draft.text == "reunião de equipe"


def test_daily_without_date_defaults_to_today():
    draft = parse_reminder("diariamente beber água", today=TODAY)

    assert draft is not None
    assert draft.frequency == Frequency.DAILY
    assert draft.date == TODAY
    assert draft.time is None
    assert draft.text == "beber água"


def test_time_is_not_read_from_the_date_day():
    draft = parse_reminder("consulta dia 15 de maio", today=TODAY)

    assert draft is not None
    assert draft.date == date(2026, 5, 15)
    assert draft.time is None


@pytest.mark.parametrize("text,expected", [
    ("jantar hoje às 8 da noite", "20:00"),
    ("academia hoje às 7pm", "19:00"),
    ("acordar hoje 12am", "00:00"),
    ("almoço hoje às 1 da tarde", "13:00"),
    ("ligar hoje às 10.30", "10:30"),
])
def test_period_markers(text, expected):
    draft = parse_reminder(text, today=TODAY)

    assert draft is not None
    assert draft.time == expected


@pytest.mark.parametrize("text,expected_date", [
    ("reunião dia 15 de maio de 2026 às 14:00", date(2026, 5, 15)),
    ("reunião 3 de janeiro de 2027 às 14:00", date(2027, 1, 3)),
])
def test_month_name_date_with_explicit_year(text, expected_date):
    draft = parse_reminder(text, today=TODAY)

    assert draft is not None
    assert draft.date == expected_date
    assert draft.time == "14:00"
    assert draft.text == "reunião"


def test_number_in_label_is_not_the_time():
    draft = parse_reminder("tomar 2 comprimidos todos os dias às 8:00", today=TODAY)

    assert draft is not None
    assert draft.time == "08:00"
    assert draft.text == "tomar 2 comprimidos"


@pytest.mark.parametrize("text", ["consulta 10/06 às 9h30", "consulta 10/06 9h30"])
def test_h_as_minute_separator(text):
    draft = parse_reminder(text, today=TODAY)

    assert draft is not None
    assert draft.date == date(2026, 6, 10)
    assert draft.time == "09:30"
    assert draft.text == "consulta"


def test_bare_hour_is_the_last_resort():
    draft = parse_reminder("reunião amanhã 14", today=TODAY)

    assert draft is not None
    assert draft.time == "14:00"
    assert draft.text == "reunião"


def test_out_of_range_hour_means_no_time():
    draft = parse_reminder("reunião amanhã às 25:00", today=TODAY)

    assert draft is not None
    assert draft.date == date(2026, 5, 2)
    assert draft.time is None


# =============================================================================
# NON-MATCHES
# =============================================================================

@pytest.mark.parametrize("text", [
    "oi",
    "tudo bem?",
    "comprar pão às 10:00",  # time but no date and not daily
    "consulta 31 de fevereiro",  # impossible date
])
def test_not_a_reminder(text):
    assert parse_reminder(text, today=TODAY) is None


def test_empty_label_is_not_a_reminder():
    assert parse_reminder("amanhã às 10:00", today=TODAY) is None


def test_parse_is_deterministic():
    text = "me avise dia 15 de maio às 14:00 da reunião"
    assert parse_reminder(text, today=TODAY) == parse_reminder(text, today=TODAY)


@freeze_time("2026-03-10 15:00:00")
def test_default_today_uses_local_timezone():
    # 15:00 UTC is 12:00 in São Paulo, same calendar day
    draft = parse_reminder("reunião hoje às 10")

    assert draft is not None
    assert draft.date == date(2026, 3, 10)


@freeze_time("2026-03-11 01:30:00")
def test_default_today_before_utc_midnight_rollover():
    # 01:30 UTC is still the 10th in São Paulo
    draft = parse_reminder("reunião hoje às 10")

    assert draft is not None
    assert draft.date == date(2026, 3, 10)


# =============================================================================
# RULE LISTS
# =============================================================================

def test_first_rule_in_list_wins_over_earlier_text_position():
    match = first_match(DATE_RULES, "hoje ou dia 15 de maio", TODAY)

    assert match.rule == "day_of_month_name"
    assert match.value == date(2026, 5, 15)


def test_failed_extractor_falls_through_to_next_rule():
    # "foo" is not a month: both month-name rules fail, "amanhã" wins
    match = first_match(DATE_RULES, "dia 5 de foo amanhã", TODAY)

    assert match.rule == "tomorrow"
    assert match.value == date(2026, 5, 2)


def test_impossible_calendar_date_falls_through():
    match = first_match(DATE_RULES, "31 de fevereiro, remarcar para hoje", TODAY)

    assert match.rule == "today"
    assert match.value == TODAY


@pytest.mark.parametrize("text,rule", [
    ("tomar 2 comprimidos às 8:00", "at"),
    ("tomar 2 comprimidos 8:00", "clock"),
    ("tomar 2 comprimidos 8pm", "period"),
    ("tomar 2 comprimidos", "bare"),
])
def test_anchored_time_rules_win_over_bare_numbers(text, rule):
    assert first_match(TIME_RULES, text, TODAY).rule == rule


def test_no_rule_matches():
    assert first_match(DATE_RULES, "sem data nenhuma", TODAY) is None
    assert first_match(TIME_RULES, "sem hora nenhuma", TODAY) is None


def test_match_span_points_at_the_matched_text():
    text = "reunião dia 15 de maio"
    match = first_match(DATE_RULES, text, TODAY)

    assert text[match.start:match.end] == "dia 15 de maio"


@pytest.mark.parametrize("text,expected", [
    ("todos os dias", Frequency.DAILY),
    ("todo dia de manhã", Frequency.DAILY),
    ("toda semana", Frequency.WEEKLY),
    ("pagar mensalmente", Frequency.MONTHLY),
    ("todo mês", Frequency.MONTHLY),
    ("uma vez só", Frequency.ONCE),
])
def test_detect_frequency(text, expected):
    assert detect_frequency(text) == expected
