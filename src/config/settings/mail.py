"""Settings do envio de notificações por e-mail (Gmail API).

A credencial é uma service account com delegação de domínio: o google-auth
troca a assinatura JWT por um token de acesso curto e o renova ao expirar.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

GMAIL_SEND_SCOPE: str = "https://www.googleapis.com/auth/gmail.send"


@dataclass(frozen=True)
class MailSettings:
    """Configurações do notificador.

    Attributes:
        enabled: Se o envio está habilitado
        service_account_json: JSON da service account (conteúdo, não caminho)
        sender: Caixa que envia (sujeito da delegação)
        notify_to: Destinatário das notificações operacionais
    """

    enabled: bool = False
    service_account_json: str = ""
    sender: str = ""
    notify_to: str = ""

    def validate(self) -> list[str]:
        """Valida credenciais quando o envio está habilitado."""
        if not self.enabled:
            return []
        errors: list[str] = []
        if not self.service_account_json:
            errors.append("MAIL_SERVICE_ACCOUNT_JSON não configurado")
        if not self.sender:
            errors.append("MAIL_SENDER não configurado")
        if not self.notify_to:
            errors.append("MAIL_NOTIFY_TO não configurado")
        return errors


def load_mail_settings() -> MailSettings:
    """Carrega MailSettings de variáveis de ambiente."""
    return MailSettings(
        enabled=os.getenv("MAIL_ENABLED", "false").lower() in ("true", "1", "yes"),
        service_account_json=os.getenv("MAIL_SERVICE_ACCOUNT_JSON", ""),
        sender=os.getenv("MAIL_SENDER", ""),
        notify_to=os.getenv("MAIL_NOTIFY_TO", ""),
    )
