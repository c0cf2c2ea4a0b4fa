import logging
import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from typing import Optional

from flask import current_app

logger = logging.getLogger(__name__)


def send_email(to_email: str, subject: str, html_body: str, text_body: Optional[str] = None) -> bool:
    """Enviar email usando SMTP"""
    config = current_app.config
    smtp_password = config.get('SMTP_PASSWORD')

    if not smtp_password:
        logger.warning(f"SMTP_PASSWORD não configurado. Email para {to_email} não enviado.")
        return False

    try:
        msg = MIMEMultipart('alternative')
        msg['Subject'] = subject
        msg['From'] = config['MAIL_FROM']
        msg['To'] = to_email

        if text_body:
            msg.attach(MIMEText(text_body, 'plain'))
        msg.attach(MIMEText(html_body, 'html'))

        # Porta 465 = SSL direto, outras = STARTTLS
        if config['SMTP_PORT'] == 465:
            with smtplib.SMTP_SSL(config['SMTP_SERVER'], config['SMTP_PORT']) as server:
                server.login(config['SMTP_USERNAME'], smtp_password)
                server.send_message(msg)
        else:
            with smtplib.SMTP(config['SMTP_SERVER'], config['SMTP_PORT']) as server:
                server.starttls()
                server.login(config['SMTP_USERNAME'], smtp_password)
                server.send_message(msg)

        logger.info(f"Email enviado para {to_email}")
        return True

    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"Erro ao enviar email para {to_email}: {e}")
        return False


def send_password_reset_email(user, token: str) -> bool:
    """Enviar email de recuperação de senha"""
    reset_url = f"{current_app.config['FRONTEND_URL'].rstrip('/')}/reset-password/{token}"
    minutes = current_app.config['RESET_TOKEN_EXPIRES_IN'] // 60

    subject = "Reset your PinQuest password"
    html_body = f"""
    <p>Hi <strong>{user.name}</strong>,</p>
    <p>We received a request to reset your PinQuest password.</p>
    <p><a href="{reset_url}">Choose a new password</a></p>
    <p>This link expires in {minutes} minutes. If you did not ask for it, ignore this email.</p>
    """
    text_body = f"Hi {user.name},\n\nReset your password: {reset_url}\n\nThis link expires in {minutes} minutes."
    return send_email(user.email, subject, html_body, text_body)


def send_verification_email(user, token: str) -> bool:
    """Enviar email de confirmação de conta"""
    verify_url = f"{current_app.config['FRONTEND_URL'].rstrip('/')}/verify-email/{token}"

    subject = "Confirm your PinQuest email"
    html_body = f"""
    <p>Welcome to PinQuest, <strong>{user.name}</strong>!</p>
    <p><a href="{verify_url}">Confirm your email address</a></p>
    """
    text_body = f"Welcome to PinQuest, {user.name}!\n\nConfirm your email: {verify_url}"
    return send_email(user.email, subject, html_body, text_body)
