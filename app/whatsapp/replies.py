"""Reply templates for in-band bot commands."""

from app.models import SupervisorStatus


STOP_REPLY = (
    "🛑 *SISTEM SEND WA DIHENTIKAN*\n\n"
    "Semua pengiriman pesan telah dihentikan.\n"
    'Ketik "START" untuk mengaktifkan kembali sistem.'
)

START_REPLY = (
    "✅ *SISTEM SEND WA DIAKTIFKAN*\n\n"
    "Semua pengiriman pesan sudah aktif kembali.\n"
    "Sistem siap menerima request."
)


def status_reply(status: SupervisorStatus) -> str:
    """Render the STATUS command reply."""
    status_icon = "✅" if status.enabled else "🛑"
    status_text = "AKTIF" if status.enabled else "NONAKTIF"
    connection_icon = "🟢" if status.connected else "🔴"
    connection_text = "Tersambung" if status.connected else "Terputus"

    return (
        "📊 *STATUS SISTEM WA GATEWAY*\n\n"
        f"{status_icon} Status Sistem: *{status_text}*\n"
        f"{connection_icon} Koneksi WA: *{connection_text}*\n"
        f"🔄 Retry Count: {status.retry_count}/{status.max_retries}\n"
        f"🤖 User: {status.user_id or 'Not connected'}\n\n"
        "*Perintah tersedia:*\n"
        "• STOP - Hentikan sistem\n"
        "• START - Aktifkan sistem\n"
        "• STATUS - Cek status\n\n"
        "_Kirim pesan private atau mention saya di grup_"
    )


def help_reply(bot_number: str) -> str:
    return (
        "🤖 *WA GATEWAY BOT COMMANDS*\n\n"
        "*Kontrol Sistem:*\n"
        "• START - Aktifkan sistem send WA\n"
        "• STOP - Hentikan sistem send WA\n"
        "• STATUS - Lihat status sistem\n"
        "• HELP - Tampilkan menu ini\n\n"
        "*Cara Penggunaan:*\n"
        "1. Kirim pesan private ke bot\n"
        "2. Mention/tag bot di grup dengan perintah\n\n"
        f"*Contoh:* @{bot_number} status\n\n"
        "_Bot akan merespon sesuai perintah yang diberikan_"
    )
