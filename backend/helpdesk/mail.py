import logging

import requests
from fastapi import HTTPException

from .config import Settings
from .messages import MailMessagesError

logger = logging.getLogger(__name__)

# colas del servicio de correo
QUEUE_REGISTER = "register"
QUEUE_LOGIN = "login"
QUEUE_FORGOT_PASSWORD = "forgot_password"
QUEUE_RECOVERY = "recovery"


class Mailer:
    """Despacho síncrono al microservicio de correo: POST {url}/email/{exchange}/{queue}."""

    def __init__(self, settings: Settings, session: requests.Session | None = None):
        self.settings = settings
        self.session = session or requests.Session()

    def _branding(self) -> dict:
        s = self.settings
        return {
            "color": s.APP_COLOR,
            "emailFrom": s.APP_EMAIL_FROM,
            "urlApp": s.APP_FRONT_HOST,
            "mailApp": s.APP_MAIL,
            "imgApp": s.APP_IMG,
        }

    def send(self, queue: str, body: dict) -> None:
        base_url = (self.settings.URL_MAIL_SERVICE or "").rstrip("/")
        if not base_url:
            logger.error("URL_MAIL_SERVICE no configurada; no se envía correo a la cola %s", queue)
            raise HTTPException(status_code=500, detail=MailMessagesError.MAIL_NOT_CONFIGURED)

        url = f"{base_url}/email/{self.settings.APP_EXCHANGE}/{queue}"
        payload = {**body, **self._branding()}
        try:
            r = self.session.post(url, json=payload, timeout=self.settings.MAIL_TIMEOUT_SECONDS)
        except requests.RequestException as e:
            logger.error("Fallo de transporte enviando correo a %s: %s", url, e)
            raise HTTPException(status_code=500, detail=MailMessagesError.MAIL_NOT_SENT)

        if not r.ok:
            logger.error("Servicio de correo respondió %s para la cola %s", r.status_code, queue)
            raise HTTPException(status_code=500, detail=MailMessagesError.MAIL_NOT_SENT)

        try:
            data = r.json()
        except ValueError:
            data = {}
        if isinstance(data, dict) and data.get("ok") is False:
            logger.error("Servicio de correo rechazó el envío a la cola %s: %s", queue, data)
            raise HTTPException(status_code=500, detail=MailMessagesError.MAIL_NOT_SENT)

        logger.info("Correo encolado en %s para %s", queue, body.get("email"))
