"""Format reminder messages (pt-BR, WhatsApp/Discord-style *bold*)."""

from datetime import date

from .models import Frequency, Reminder

FREQUENCY_LABELS = {
    Frequency.ONCE: "única vez",
    Frequency.DAILY: "diariamente",
    Frequency.WEEKLY: "semanalmente",
    Frequency.MONTHLY: "mensalmente",
}


def format_date(value: date) -> str:
    """Calendar date as dd/mm/yyyy."""
    return value.strftime("%d/%m/%Y")


def format_fire_now(reminder: Reminder) -> str:
    """Message sent when the reminder's due window opens."""
    return (
        f"🔔 *LEMBRETE*: {reminder.text}\n"
        f"⏰ Horário: {reminder.time}\n"
        f"🔄 Frequência: {FREQUENCY_LABELS[reminder.frequency]}\n"
        f"🆔 ID: {reminder.id}"
    )


def format_day_before(reminder: Reminder) -> str:
    """Advance notice sent the day before a non-daily reminder."""
    return (
        f"⚠️ *LEMBRETE PARA AMANHÃ*: {reminder.text}\n"
        f"⏰ Horário: {reminder.time}\n"
        f"📆 Data: {format_date(reminder.date)}\n"
        f"🆔 ID: {reminder.id}"
    )


def format_created(reminder: Reminder) -> str:
    """Confirmation after a reminder is stored."""
    return (
        "✅ Lembrete criado com sucesso!\n"
        f"📝 *{reminder.text}*\n"
        f"📆 Data: {format_date(reminder.date)}\n"
        f"⏰ Horário: {reminder.time}\n"
        f"🔄 Frequência: {FREQUENCY_LABELS[reminder.frequency]}\n"
        f"🆔 ID: {reminder.id}\n\n"
        "Para ver seus lembretes, digite /list\n"
        "Para marcar como concluído, use /complete ID"
    )


def format_reminder_list(reminders: list[Reminder]) -> str:
    """Numbered list of a user's reminders with status, schedule and id."""
    if not reminders:
        return "📝 Você não tem lembretes ativos."

    entries = []
    for index, reminder in enumerate(reminders, start=1):
        if reminder.completed:
            status = "✅"
        elif reminder.notified:
            status = "🔔"
        else:
            status = "⏳"
        entries.append(
            f"{status} *{index}.* {reminder.text}\n"
            f"📆 Data: {format_date(reminder.date)} ⏰ Hora: {reminder.time}\n"
            f"🔄 Frequência: {FREQUENCY_LABELS[reminder.frequency]}\n"
            f"🆔 ID: {reminder.id}"
        )

    return (
        "*📋 Seus Lembretes:*\n\n"
        + "\n\n".join(entries)
        + "\n\nPara marcar como concluído, use /complete ID (ou o número da lista)\n"
        "Para remover, use /delete ID"
    )


HELP_MESSAGE = (
    "*🤖 Bot de Lembretes - Comandos*\n\n"
    "Para criar um lembrete, simplesmente envie uma mensagem descrevendo o evento, "
    "data e hora. Exemplos:\n\n"
    "\"Reunião amanhã às 14:00\"\n"
    "\"Consulta médica dia 15 de maio às 10:30\"\n"
    "\"Todos os dias preciso tomar vitamina às 8:00\"\n\n"
    "*Comandos disponíveis:*\n"
    "/list - Listar todos seus lembretes\n"
    "/complete ID - Marcar um lembrete como concluído\n"
    "/delete ID - Remover um lembrete\n"
    "/help - Mostrar esta mensagem de ajuda"
)

NOT_UNDERSTOOD_MESSAGE = (
    "Não entendi como um lembrete. Tente algo como:\n\n"
    "\"Reunião com cliente dia 15 de maio às 14:00\"\n"
    "\"Todos os dias preciso tomar remédio às 8:00\"\n\n"
    "Para ajuda, digite /help"
)

UNKNOWN_COMMAND_MESSAGE = "❓ Comando não reconhecido. Digite /help para ver os comandos disponíveis."


def usage_hint(command: str) -> str:
    """Reply for a command that needs an id but got none."""
    return f"❌ Por favor, forneça o ID do lembrete. Exemplo: {command} remind_1a2b3c4d"
