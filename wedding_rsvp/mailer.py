# wedding_rsvp/mailer.py  # Ruta y nombre del archivo.

# =================================================================================
# 📧 MÓDULO DE ENVÍO DE CORREOS (texto + HTML)
# ---------------------------------------------------------------------------------
# Centraliza el envío de invitaciones por Resend (API HTTP) o SendGrid
# (conmutables con EMAIL_PROVIDER), la plantilla de la invitación y el modo
# DRY_RUN, que solo registra el envío en logs.
# Contrato: las funciones públicas devuelven True/False y nunca lanzan.
# =================================================================================

# 🐍 Importaciones
import os                                                                              # Acceso a variables de entorno (.env).
import html                                                                            # Escape seguro para valores libres en HTML.
import json                                                                            # Serialización JSON para payloads.
import requests                                                                        # HTTP para Resend y el webhook de alertas.
from loguru import logger                                                              # Logger estructurado.
from sendgrid import SendGridAPIClient                                                 # Cliente oficial de SendGrid.
from sendgrid.helpers.mail import Mail, From, ReplyTo                                  # Construcción del mensaje.

# =================================================================================
# ✅ Configuración unificada al inicio del archivo.
# ---------------------------------------------------------------------------------
# Se valida la configuración crítica solo si DRY_RUN=0 (evita fallos en dev/CI).
# Las funciones de envío vuelven a leer DRY_RUN/EMAIL_PROVIDER en runtime.
# =================================================================================
DRY_RUN = os.getenv("DRY_RUN", "1") == "1"
EMAIL_PROVIDER = os.getenv("EMAIL_PROVIDER", "resend").lower()
FROM_EMAIL = os.getenv("EMAIL_FROM", "")
EMAIL_SENDER_NAME = os.getenv("EMAIL_SENDER_NAME", "Lili y José")
RESEND_API_URL = os.getenv("RESEND_API_URL", "https://api.resend.com/emails")
EMAIL_TIMEOUT = float(os.getenv("EMAIL_TIMEOUT", "10"))

if not DRY_RUN:
    if EMAIL_PROVIDER == "resend" and not os.getenv("RESEND_API_KEY"):
        raise RuntimeError("Falta RESEND_API_KEY para envíos reales con Resend.")
    if EMAIL_PROVIDER == "sendgrid" and not os.getenv("SENDGRID_API_KEY"):
        raise RuntimeError("Falta SENDGRID_API_KEY para envíos reales con SendGrid.")
    if not FROM_EMAIL:
        raise RuntimeError("Falta EMAIL_FROM para envíos reales.")

# =================================================================================
# 📢 Webhook de alertas (opcional)
# =================================================================================
def send_alert_webhook(title: str, message: str) -> None:
    """Envía alerta a webhook si ALERT_WEBHOOK_URL está definido; silencioso si no."""
    url = os.getenv("ALERT_WEBHOOK_URL")
    if not url:
        return
    try:
        payload = {"text": f"{title}\n{message}"}                                     # Payload simple (Slack/Teams compatible).
        headers = {"Content-Type": "application/json"}
        requests.post(url, data=json.dumps(payload), headers=headers, timeout=5)
    except requests.RequestException as e:
        logger.error("No se pudo notificar alerta por webhook: {}", e)

def _mask_email(addr: str | None) -> str:
    """Enmascara un email para no exponer PII en logs."""
    if not addr:
        return "<no-email>"
    addr = addr.strip()
    if "@" not in addr or len(addr) < 3:
        return addr[:2] + "***"
    name, dom = addr.split("@", 1)
    return name[:2] + "***@" + dom

# =================================================================================
# 🧾 Plantilla de la invitación
# =================================================================================
INVITATION_SUBJECT = "Invitación a nuestra boda - Lili y José"

INVITATION_TEXT = (
    "Querido/a {name},\n\n"
    "¡Estamos muy emocionados de invitarte a celebrar nuestra boda!\n\n"
    "Por favor, confirma tu asistencia haciendo clic en el siguiente enlace:\n"
    "{url}\n\n"
    "¡Esperamos verte pronto!\n\n"
    "Con cariño,\nLili y José"
)

INVITATION_HTML = """<!DOCTYPE html>
<html lang="es">
<head><meta charset="utf-8"><meta name="viewport" content="width=device-width, initial-scale=1"></head>
<body style="font-family:-apple-system,'Segoe UI',Roboto,sans-serif;line-height:1.6;color:#333;max-width:600px;margin:0 auto;padding:20px">
  <div style="background:#f9f9f9;padding:30px;border-radius:12px;text-align:center">
    <h1 style="color:#e15d4c">¡Nos casamos!</h1>
    <p>Querido/a <strong>{name}</strong>,</p>
    <p>¡Estamos muy emocionados de invitarte a celebrar nuestra boda!</p>
    <a href="{url}" style="display:inline-block;background:#e15d4c;color:white;padding:14px 32px;text-decoration:none;border-radius:8px;font-weight:600;margin:20px 0">Confirmar asistencia</a>
    <p style="font-size:13px;color:#666">Si el botón no funciona, copia y pega este enlace en tu navegador:<br>{url}</p>
  </div>
  <p style="text-align:center;margin-top:30px;color:#666;font-size:14px">Con cariño,<br>Lili y José</p>
</body>
</html>"""

def build_invitation_email(guest_name: str, rsvp_url: str) -> tuple[str, str, str]:
    """Devuelve (asunto, texto plano, HTML) de la invitación."""
    text = INVITATION_TEXT.format(name=guest_name, url=rsvp_url)
    html_body = INVITATION_HTML.format(name=html.escape(guest_name), url=html.escape(rsvp_url, quote=True))
    return INVITATION_SUBJECT, text, html_body

# =================================================================================
# ✉️ Motores de envío internos
# =================================================================================
def _send_via_resend(to_email: str, subject: str, text: str, html_body: str) -> bool:
    """Un único POST a la API de Resend."""
    api_key = os.getenv("RESEND_API_KEY", "")
    from_addr = os.getenv("EMAIL_FROM", FROM_EMAIL)
    if not (api_key and from_addr):
        logger.error("Config de mailer incompleta (Resend): EMAIL_FROM o RESEND_API_KEY ausentes.")
        send_alert_webhook("🚨 Mailer config (Resend)", "Falta EMAIL_FROM o RESEND_API_KEY (modo real).")
        return False

    payload = {
        "from": f"{EMAIL_SENDER_NAME} <{from_addr}>",
        "to": [to_email],
        "subject": subject,
        "text": text,
        "html": html_body,
    }
    if os.getenv("EMAIL_REPLY_TO"):
        payload["reply_to"] = os.getenv("EMAIL_REPLY_TO")

    try:
        response = requests.post(
            RESEND_API_URL,
            json=payload,
            headers={"Authorization": f"Bearer {api_key}"},
            timeout=EMAIL_TIMEOUT,
        )
    except requests.RequestException as e:
        logger.error("Excepción enviando con Resend a {}: {}", _mask_email(to_email), e)
        send_alert_webhook("🚨 Mailer exception (Resend)", f"Excepción enviando a {_mask_email(to_email)}. Error: {e}")
        return False

    if response.ok:
        logger.info("Resend → enviado a {} | status={}", _mask_email(to_email), response.status_code)
        return True
    logger.error("Resend error -> status={} | body={}", response.status_code, response.text[:300])
    send_alert_webhook("🚨 Mailer error (Resend)", f"No se pudo enviar a {_mask_email(to_email)}. Código: {response.status_code}.")
    return False

def _send_via_sendgrid(to_email: str, subject: str, text: str, html_body: str) -> bool:
    api_key = os.getenv("SENDGRID_API_KEY", "")
    from_addr = os.getenv("EMAIL_FROM", FROM_EMAIL)
    if not (api_key and from_addr):
        logger.error("Config de mailer incompleta (SendGrid): EMAIL_FROM o SENDGRID_API_KEY ausentes.")
        send_alert_webhook("🚨 Mailer config (SendGrid)", "Falta EMAIL_FROM o SENDGRID_API_KEY (modo real).")
        return False

    message = Mail(
        from_email=From(from_addr, EMAIL_SENDER_NAME),
        to_emails=to_email,
        subject=subject,
        plain_text_content=text,
        html_content=html_body,
    )
    if os.getenv("EMAIL_REPLY_TO"):
        message.reply_to = ReplyTo(os.getenv("EMAIL_REPLY_TO"))

    try:
        response = SendGridAPIClient(api_key).send(message)
    except Exception as e:                                                             # El cliente lanza HTTPError propios y de red.
        logger.exception("Excepción enviando con SendGrid a {}: {}", _mask_email(to_email), e)
        send_alert_webhook("🚨 Mailer exception (SendGrid)", f"Excepción enviando a {_mask_email(to_email)}. Error: {e}")
        return False

    logger.info("SendGrid response: {} | X-Message-Id: {}", response.status_code, response.headers.get("X-Message-Id"))
    if 200 <= response.status_code < 300:
        return True
    send_alert_webhook("🚨 Mailer error (SendGrid)", f"No se pudo enviar a {_mask_email(to_email)}. Código: {response.status_code}.")
    return False

# =================================================================================
# 🧩 API pública
# =================================================================================
def send_email(to_email: str, subject: str, text: str, html_body: str) -> bool:
    """Envía un correo enrutando al proveedor configurado; True si se aceptó."""
    if os.getenv("DRY_RUN", "1") == "1":
        logger.info("[DRY_RUN] Simular envío a {} | Asunto: {}\n{}", _mask_email(to_email), subject, text)
        return True

    provider = os.getenv("EMAIL_PROVIDER", EMAIL_PROVIDER).lower()
    if provider == "sendgrid":
        return _send_via_sendgrid(to_email, subject, text, html_body)
    return _send_via_resend(to_email, subject, text, html_body)

def send_invitation_email(to_email: str, guest_name: str, rsvp_url: str) -> bool:
    """Envía la invitación con el enlace RSVP del invitado."""
    if not to_email:
        logger.warning("Invitación sin email de destino; no se envía.")
        return False
    subject, text, html_body = build_invitation_email(guest_name, rsvp_url)
    return send_email(to_email, subject, text, html_body)
